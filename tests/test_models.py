from __future__ import annotations

from whattheport.models import ListeningPort


def test_same_listener_equal_across_scans_despite_enrichment():
    first = ListeningPort(port=3000, pid=42, process="node", project_name="shop", start_time=100.0)
    second = ListeningPort(port=3000, pid=42, process="node", working_dir="/srv/shop", start_time=250.0)

    assert first == second
    assert hash(first) == hash(second)


def test_different_pid_on_same_port_is_a_different_listener():
    assert ListeningPort(port=3000, pid=42, process="node") != ListeningPort(
        port=3000, pid=43, process="node"
    )
