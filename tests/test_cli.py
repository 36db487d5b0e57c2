"""
Tests for the bucket-topology command line inspector

Run with: python -m pytest tests/test_cli.py -v
"""

import json

import pytest

from bucket_topology.cli import main, parse_args
from bucket_topology.cluster.router import partition_for_key


@pytest.fixture
def config_file(tmp_path, document):
    path = tmp_path / "bucket.json"
    path.write_text(json.dumps(document))
    return path


@pytest.mark.integration
class TestMain:
    """Test the inspector end to end."""

    def test_summary(self, config_file, capsys):
        assert main([str(config_file)]) == 0

        out = capsys.readouterr().out
        assert "Bucket default (rev 1073)" in out
        assert "Partitions: 4" in out
        assert "Replicas: 1" in out
        assert "[2] 10.0.0.3 (no primary)" in out
        assert "[0] 10.0.0.1 (primary)" in out

    def test_locate_key(self, config_file, capsys):
        assert main([str(config_file), "--key", "user:1"]) == 0

        partition = partition_for_key("user:1", 4)
        out = capsys.readouterr().out
        assert f"Key user:1 -> partition {partition}, replica 0:" in out

    def test_fast_forward_without_map_fails(self, config_file):
        assert main([str(config_file), "--key", "user:1", "--fast-forward"]) == 1

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "missing.json")]) == 1

    def test_invalid_config(self, tmp_path, document):
        document["vBucketServerMap"]["serverList"].append("10.0.0.9:11210")
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(document))

        assert main([str(path)]) == 1


class TestParseArgs:
    """Test argument defaults."""

    def test_defaults(self):
        args = parse_args(["bucket.json"])

        assert args.key is None
        assert args.replica == 0
        assert args.fast_forward is False
