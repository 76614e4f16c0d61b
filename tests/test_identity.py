import pytest

from conftest import gateway_filter, route_table_filter
from netplane.resources import CardinalityFault
from netplane.resources.identity import (
    INTERNET_GATEWAY_NAME,
    ROUTE_TABLE_SUBNET_PAIR,
    dict_to_tags,
    resolve_one,
    tag_filter,
    tags_to_dict,
)


def test_tag_filter():
    assert tag_filter(ROUTE_TABLE_SUBNET_PAIR, "pool-a") == route_table_filter("pool-a")


def test_resolve_one_returns_the_single_match(ec2, stubber):
    stubber.add_response(
        "describe_internet_gateways",
        {"InternetGateways": [{"InternetGatewayId": "igw-1"}]},
        {"Filters": gateway_filter("kube")},
    )

    gateway = resolve_one(ec2, INTERNET_GATEWAY_NAME, "kube")

    assert gateway["InternetGatewayId"] == "igw-1"


def test_resolve_one_never_picks_among_candidates(ec2, stubber):
    stubber.add_response(
        "describe_route_tables",
        {"RouteTables": [{"RouteTableId": "rtb-1"}, {"RouteTableId": "rtb-2"}]},
        {"Filters": route_table_filter("pool-a")},
    )

    with pytest.raises(CardinalityFault) as e:
        resolve_one(ec2, ROUTE_TABLE_SUBNET_PAIR, "pool-a")

    assert str(e.value) == (
        "Found [2] route_table objects for filter "
        "[tag:kubicorn-route-table-subnet-pair=pool-a], expected [1]"
    )
    assert e.value.filters == route_table_filter("pool-a")


def test_tags_to_dict():
    assert tags_to_dict([{"Key": "a", "Value": "1"}, {"Key": "b", "Value": "2"}]) == {"a": "1", "b": "2"}
    assert tags_to_dict(None) == {}


def test_dict_to_tags_is_ordered_by_key():
    assert dict_to_tags({"b": "2", "a": "1"}) == [
        {"Key": "a", "Value": "1"},
        {"Key": "b", "Value": "2"},
    ]
