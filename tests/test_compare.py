import pytest

from netplane.resources import ComparisonError, ResourceKind, Snapshot, is_equal


def snap(name="pool-a", cloud_id="pool-a", tags=None, kind=ResourceKind.ROUTE_TABLE):
    if tags is None:
        tags = {"Name": "pool-a", "KubernetesCluster": "kube"}
    return Snapshot(kind=kind, name=name, cloud_id=cloud_id, tags=tags)


def test_identical_snapshots_are_equal():
    assert is_equal(snap(), snap())


def test_tag_order_is_irrelevant():
    a = snap(tags={"Name": "pool-a", "KubernetesCluster": "kube"})
    b = snap(tags={"KubernetesCluster": "kube", "Name": "pool-a"})
    assert is_equal(a, b)


@pytest.mark.parametrize(
    "other",
    [
        snap(name="pool-b"),
        snap(cloud_id=""),
        snap(tags={"Name": "pool-a"}),
        snap(tags={"Name": "pool-a", "KubernetesCluster": "kube", "extra": "1"}),
        snap(tags={"Name": "pool-a", "KubernetesCluster": "other"}),
    ],
)
def test_any_field_difference_is_unequal(other):
    assert not is_equal(snap(), other)
    assert not is_equal(other, snap())


def test_non_snapshot_is_an_error():
    with pytest.raises(ComparisonError):
        is_equal(snap(), {"name": "pool-a"})
    with pytest.raises(ComparisonError):
        is_equal(None, snap())


def test_different_kinds_are_an_error():
    with pytest.raises(ComparisonError):
        is_equal(snap(), snap(kind=ResourceKind.INTERNET_GATEWAY))


def test_snapshot_tags_are_read_only():
    source = {"Name": "pool-a"}
    s = snap(tags=source)
    source["Name"] = "changed"

    assert s.tags["Name"] == "pool-a"
    with pytest.raises(TypeError):
        s.tags["Name"] = "x"
