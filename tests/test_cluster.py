from netplane.cluster import Cluster, Network, ServerPool, Subnet


def make_cluster():
    return Cluster(
        name="kube",
        network=Network(identifier="vpc-1"),
        server_pools=[
            ServerPool(name="masters", identifier="asg-1", subnets=[Subnet(name="masters", identifier="subnet-1")]),
            ServerPool(name="nodes", subnets=[Subnet(name="nodes-a"), Subnet(name="nodes-b", identifier="subnet-3")]),
        ],
    )


def test_dict_form_round_trips():
    cluster = make_cluster()
    assert Cluster.from_dict(cluster.to_dict()) == cluster


def test_from_dict_defaults_missing_identifiers():
    cluster = Cluster.from_dict({"name": "kube", "server_pools": [{"name": "p", "subnets": [{"name": "s"}]}]})

    assert cluster.network.identifier == ""
    assert cluster.server_pools[0].identifier == ""
    assert cluster.server_pools[0].subnets[0].identifier == ""


def test_unrealized_clears_every_identifier_and_keeps_order():
    cluster = make_cluster()

    bare = cluster.unrealized()

    assert bare.name == "kube"
    assert bare.network.identifier == ""
    assert [p.name for p in bare.server_pools] == ["masters", "nodes"]
    assert [s.name for s in bare.server_pools[1].subnets] == ["nodes-a", "nodes-b"]
    assert all(not s.identifier for p in bare.server_pools for s in p.subnets)
    # the source cluster is untouched
    assert cluster.server_pools[0].subnets[0].identifier == "subnet-1"


def test_find_subnet():
    cluster = make_cluster()

    assert cluster.find_subnet("nodes", "nodes-b").identifier == "subnet-3"
    assert cluster.find_subnet("nodes", "masters") is None
    assert cluster.find_subnet("missing", "nodes-a") is None


def test_get_server_pool():
    cluster = make_cluster()

    assert cluster.get_server_pool("masters").identifier == "asg-1"
    assert cluster.get_server_pool("other") is None


def test_adopt_identifiers_copies_matching_entries_only():
    cluster = make_cluster().unrealized()
    cluster.server_pools.append(ServerPool(name="extra", subnets=[Subnet(name="extra")]))
    recorded = Cluster(
        name="kube",
        network=Network(identifier="vpc-1"),
        server_pools=[ServerPool(name="nodes", subnets=[Subnet(name="nodes-b", identifier="subnet-3")])],
    )

    cluster.adopt_identifiers(recorded)

    assert cluster.network.identifier == "vpc-1"
    assert cluster.find_subnet("nodes", "nodes-b").identifier == "subnet-3"
    assert cluster.find_subnet("nodes", "nodes-a").identifier == ""
    assert cluster.find_subnet("masters", "masters").identifier == ""
    assert cluster.find_subnet("extra", "extra").identifier == ""
