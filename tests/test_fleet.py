from clusterwalker.schemas.cluster import DesiredGroup
from clusterwalker.schemas.validation import FailureKind, ValidationReport
from clusterwalker.validation.filters import AllGroups, GroupsByName
from clusterwalker.validation.fleet import classify_node, reconcile_fleet


def _kinds(report):
    return [f.kind for f in report.failures]


def test_healthy_fleet_has_no_failures(make_node, make_member, make_cloud_group):
    cp = DesiredGroup(name="control-plane", role="control-plane")
    nodes = DesiredGroup(name="nodes", role="node", min_size=2)
    cloud = {
        "control-plane": make_cloud_group(
            cp, [make_member("i-cp", make_node("cp-1", control_plane=True))]
        ),
        "nodes": make_cloud_group(
            nodes,
            [
                make_member("i-1", make_node("node-1")),
                make_member("i-2", make_node("node-2")),
            ],
        ),
    }
    report = ValidationReport()

    state = reconcile_fleet(cloud, [cp, nodes], AllGroups(), report)

    assert report.failures == []
    assert [n.name for n in report.nodes] == ["cp-1", "node-1", "node-2"]
    assert [n.role for n in report.nodes] == ["control-plane", "node", "node"]
    assert [n.name for n in state.ready_nodes] == ["cp-1", "node-1", "node-2"]
    assert state.node_groups["node-2"] is nodes


def test_detached_member_not_counted_and_not_reported(
    make_node, make_member, make_cloud_group
):
    workers = DesiredGroup(name="workers", role="worker", min_size=3)
    cloud = {
        "workers": make_cloud_group(
            workers,
            [
                make_member("i-1", make_node("n1")),
                make_member("i-2", make_node("n2")),
                make_member("i-3", detached=True),
            ],
            target_size=3,
        )
    }
    report = ValidationReport()

    reconcile_fleet(cloud, [workers], AllGroups(), report)

    assert _kinds(report) == [FailureKind.INSTANCE_GROUP]
    failure = report.failures[0]
    assert failure.name == "workers"
    assert "2 vs 3" in failure.message
    assert failure.instance_group is workers


def test_need_update_members_count_towards_target(
    make_node, make_member, make_cloud_group
):
    nodes = DesiredGroup(name="nodes")
    cloud = {
        "nodes": make_cloud_group(
            nodes,
            [make_member("i-1", make_node("n1"))],
            target_size=2,
            need_update=[make_member("i-2", make_node("n2"))],
        )
    }
    report = ValidationReport()

    state = reconcile_fleet(cloud, [nodes], AllGroups(), report)

    assert report.failures == []
    assert set(state.node_groups) == {"n1", "n2"}


def test_unjoined_machine_is_reported(make_member, make_cloud_group):
    nodes = DesiredGroup(name="nodes")
    cloud = {"nodes": make_cloud_group(nodes, [make_member("i-abc")])}
    report = ValidationReport()

    reconcile_fleet(cloud, [nodes], AllGroups(), report)

    assert _kinds(report) == [FailureKind.MACHINE]
    assert report.failures[0].name == "i-abc"
    assert report.failures[0].message == 'machine "i-abc" has not yet joined cluster'


def test_members_not_expected_to_join(make_member, make_cloud_group):
    nodes = DesiredGroup(name="nodes")
    bastions = DesiredGroup(name="bastions", role="Bastion")
    cloud = {
        "nodes": make_cloud_group(
            nodes,
            [
                make_member("i-warm", warm_pool=True),
                make_member("i-warm-detached", warm_pool=True, detached=True),
            ],
            target_size=0,
        ),
        "bastions": make_cloud_group(bastions, [make_member("i-bastion")]),
    }
    report = ValidationReport()

    reconcile_fleet(cloud, [nodes, bastions], AllGroups(), report)

    assert report.failures == []
    assert report.nodes == []


def test_missing_group_reported_after_member_findings(make_member, make_cloud_group):
    nodes = DesiredGroup(name="nodes")
    gpu = DesiredGroup(name="gpu-nodes")
    cloud = {"nodes": make_cloud_group(nodes, [make_member("i-1")])}
    report = ValidationReport()

    reconcile_fleet(cloud, [nodes, gpu], AllGroups(), report)

    assert _kinds(report) == [FailureKind.MACHINE, FailureKind.INSTANCE_GROUP]
    missing = report.failures[1]
    assert missing.name == "gpu-nodes"
    assert missing.message == (
        'InstanceGroup "gpu-nodes" is missing from the cloud provider'
    )


def test_filtered_groups_produce_no_failures(make_member, make_cloud_group):
    nodes = DesiredGroup(name="nodes")
    other = DesiredGroup(name="other", min_size=5)
    absent = DesiredGroup(name="absent")
    cloud = {
        "nodes": make_cloud_group(nodes, []),
        "other": make_cloud_group(other, [make_member("i-1")], target_size=5),
    }
    report = ValidationReport()

    reconcile_fleet(cloud, [nodes, other, absent], GroupsByName(["nodes"]), report)

    assert report.failures == []


def test_unmatched_cloud_group_is_skipped(make_member):
    from clusterwalker.schemas.cloud import ObservedGroup

    nodes = DesiredGroup(name="nodes")
    cloud = {
        "stray": ObservedGroup(name="stray", target_size=3, ready=[make_member("i-1")])
    }
    report = ValidationReport()

    reconcile_fleet(cloud, [nodes], AllGroups(), report)

    assert [f.name for f in report.failures] == ["nodes"]


def test_not_ready_node_is_reported(make_node):
    group = DesiredGroup(name="nodes", role="")
    report = ValidationReport()

    ready = classify_node(make_node("n1", ready=False), group, report)

    assert ready is False
    assert report.nodes[0].role == "node"
    assert report.nodes[0].status == "False"
    assert report.failures[0].kind is FailureKind.NODE
    assert report.failures[0].message == 'node "n1" of role "node" is not ready'


def test_node_without_ready_condition_has_empty_status(make_node):
    group = DesiredGroup(name="api", role="APIServer")
    node = make_node("api-1").model_copy(update={"conditions": []})
    report = ValidationReport()

    assert classify_node(node, group, report) is False
    assert report.nodes[0].status == ""
    assert report.nodes[0].role == "apiserver"
    assert len(report.failures) == 1


def test_unrecognized_role_is_ignored(make_node, mocker):
    mock_logger = mocker.patch("clusterwalker.validation.fleet.logger")
    group = DesiredGroup(name="edge-pool", role="edge")
    report = ValidationReport()

    ready = classify_node(make_node("edge-1", ready=False), group, report)

    assert ready is False
    assert report.failures == []
    assert report.nodes == []
    mock_logger.warning.assert_called_once()
    assert '"edge"' in mock_logger.warning.call_args[0][0]


def test_ready_node_of_ignored_role_still_counts_as_ready(
    make_node, make_member, make_cloud_group
):
    edge = DesiredGroup(name="edge-pool", role="edge")
    cloud = {"edge-pool": make_cloud_group(edge, [make_member("i-1", make_node("e1"))])}
    report = ValidationReport()

    state = reconcile_fleet(cloud, [edge], AllGroups(), report)

    assert [n.name for n in state.ready_nodes] == ["e1"]
    assert report.nodes == []
