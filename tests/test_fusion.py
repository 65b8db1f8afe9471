"""Tests for measurement integration, fused lookups and the command line."""

import numpy as np
import pytest

from framefuse.cli import main
from framefuse.config import FusionSettings, SeedConfig
from framefuse.errors import UnknownFrameError
from framefuse.fusion import MeasurementEvent, TransformFusion, fuse_transforms


@pytest.fixture
def fusion(seed_yaml: str) -> TransformFusion:
    return TransformFusion.from_config(SeedConfig.from_string(seed_yaml))


class TestTransformFusion:
    """Test TransformFusion class."""

    def test_observation_connects_entities(self, fusion, make_transform) -> None:
        """Test that a camera seeing a marker links two robots."""
        seen = make_transform([0.0, 0.0, 2.0])
        fusion.observe(MeasurementEvent("robot_1/camera", "marker_7", "cam1:7", seen))

        result = fusion.lookup("robot_1", "robot_2")

        assert result.found
        assert result.path == ["robot_1", "robot_1/camera", "marker_7", "robot_2"]
        camera = fusion.graph.edges(source="robot_1", target="robot_1/camera")[0].transform
        marker = fusion.graph.edges(source="robot_2", target="marker_7")[0].transform
        assert np.allclose(result.transform, camera @ seen @ np.linalg.inv(marker))

    def test_default_weight_applied(self, make_transform) -> None:
        """Test that events without a weight get the configured default."""
        fusion = TransformFusion(FusionSettings(default_weight=4.0))
        fusion.add_frame("a")
        fusion.add_frame("b")
        fusion.observe(MeasurementEvent("a", "b", "k", make_transform([1.0, 0.0, 0.0])))
        fusion.observe(MeasurementEvent("b", "a", "k2", np.eye(4), weight=0.5))

        weights = sorted(edge.weight for edge in fusion.graph.edges())
        assert weights == [0.5, 0.5, 4.0, 4.0]

    def test_observe_unknown_frame(self, fusion) -> None:
        """Test that events referencing unknown frames are rejected."""
        with pytest.raises(UnknownFrameError):
            fusion.observe(MeasurementEvent("robot_1", "ghost", "k", np.eye(4)))

    def test_forget(self, fusion) -> None:
        """Test that forgetting a channel disconnects the frames it linked."""
        fusion.observe(MeasurementEvent("robot_1/camera", "marker_7", "cam1:7", np.eye(4)))
        assert fusion.can_reach("robot_1", "robot_2")

        assert fusion.forget("cam1:7") == 2
        assert not fusion.can_reach("robot_1", "robot_2")

    def test_smoothed_lookup(self, make_transform) -> None:
        """Test that successive lookups are blended per frame pair."""
        fusion = TransformFusion(FusionSettings(alpha=0.5))
        fusion.add_frame("a")
        fusion.add_frame("b")

        fusion.observe(MeasurementEvent("a", "b", "k", make_transform([2.0, 0.0, 0.0])))
        first = fusion.smoothed_lookup("a", "b", now=0.0)
        fusion.observe(MeasurementEvent("a", "b", "k", make_transform([4.0, 0.0, 0.0])))
        second = fusion.smoothed_lookup("a", "b", now=0.1)

        assert np.allclose(first.position, [2.0, 0.0, 0.0])
        assert np.allclose(second.position, [3.0, 0.0, 0.0])
        assert fusion.smoothed_pairs() == [("a", "b")]

    def test_smoothed_lookup_expires(self, make_transform) -> None:
        """Test that stale smoothing history is discarded."""
        fusion = TransformFusion(FusionSettings(alpha=0.5, timeout=1.0))
        fusion.add_frame("a")
        fusion.add_frame("b")

        fusion.observe(MeasurementEvent("a", "b", "k", make_transform([2.0, 0.0, 0.0])))
        fusion.smoothed_lookup("a", "b", now=0.0)
        fusion.observe(MeasurementEvent("a", "b", "k", make_transform([4.0, 0.0, 0.0])))

        assert np.allclose(fusion.smoothed_lookup("a", "b", now=5.0).position, [4.0, 0.0, 0.0])

    def test_event_timestamps_drive_smoothing(self, make_transform) -> None:
        """Test that lookups without a time use the latest event timestamp."""
        fusion = TransformFusion(FusionSettings(alpha=0.5, timeout=1.0))
        fusion.add_frame("a")
        fusion.add_frame("b")
        assert fusion.last_observed is None

        fusion.observe(
            MeasurementEvent("a", "b", "k", make_transform([2.0, 0.0, 0.0]), timestamp=10.0)
        )
        first = fusion.smoothed_lookup("a", "b")
        fusion.observe(
            MeasurementEvent("a", "b", "k", make_transform([4.0, 0.0, 0.0]), timestamp=10.5)
        )
        blended = fusion.smoothed_lookup("a", "b")
        fusion.observe(
            MeasurementEvent("a", "b", "k", make_transform([8.0, 0.0, 0.0]), timestamp=12.0)
        )
        expired = fusion.smoothed_lookup("a", "b")

        assert np.allclose(first.position, [2.0, 0.0, 0.0])
        assert np.allclose(blended.position, [3.0, 0.0, 0.0])
        assert np.allclose(expired.position, [8.0, 0.0, 0.0])
        assert fusion.last_observed == 12.0

    def test_out_of_order_event_keeps_clock(self) -> None:
        """Test that a late event does not move the clock backwards."""
        fusion = TransformFusion()
        fusion.add_frame("a")
        fusion.add_frame("b")

        fusion.observe(MeasurementEvent("a", "b", "k1", np.eye(4), timestamp=5.0))
        fusion.observe(MeasurementEvent("b", "a", "k2", np.eye(4), timestamp=3.0))

        assert fusion.last_observed == 5.0
        assert fusion.graph.edge_count() == 4

    def test_smoothed_lookup_unavailable(self, fusion) -> None:
        """Test that an unreachable pair reports None."""
        assert fusion.smoothed_lookup("robot_1", "robot_2", now=0.0) is None

    def test_reset_smoothing(self, make_transform) -> None:
        """Test that resetting restarts the blend from the next lookup."""
        fusion = TransformFusion(FusionSettings(alpha=0.5))
        fusion.add_frame("a")
        fusion.add_frame("b")

        fusion.observe(MeasurementEvent("a", "b", "k", make_transform([2.0, 0.0, 0.0])))
        fusion.smoothed_lookup("a", "b", now=0.0)
        fusion.reset_smoothing(source="a")
        fusion.observe(MeasurementEvent("a", "b", "k", make_transform([4.0, 0.0, 0.0])))

        assert np.allclose(fusion.smoothed_lookup("a", "b", now=0.1).position, [4.0, 0.0, 0.0])


class TestFuseTransforms:
    """Test averaging simultaneous transforms."""

    def test_average(self, make_transform) -> None:
        """Test fusing two symmetric observations."""
        fused = fuse_transforms(
            [make_transform([1.0, 0.0, 0.0], yaw=0.2), make_transform([3.0, 0.0, 0.0], yaw=-0.2)]
        )

        assert np.allclose(fused, make_transform([2.0, 0.0, 0.0]))

    def test_weighted(self, make_transform) -> None:
        """Test that weights apply to the translation."""
        fused = fuse_transforms(
            [make_transform([0.0, 0.0, 0.0]), make_transform([4.0, 0.0, 0.0])], [1.0, 3.0]
        )

        assert np.allclose(fused[:3, 3], [3.0, 0.0, 0.0])

    def test_weight_count_mismatch(self) -> None:
        """Test that weights must match the transforms."""
        with pytest.raises(ValueError, match="one weight per transform"):
            fuse_transforms([np.eye(4)], [1.0, 2.0])


class TestCommandLine:
    """Test the framefuse console script."""

    def test_lookup(self, tmp_path, seed_yaml: str, capsys) -> None:
        """Test printing a seeded transform."""
        path = tmp_path / "seed.yaml"
        path.write_text(seed_yaml)

        code = main(["--config", str(path), "--source", "robot_1", "--target", "robot_1/camera"])

        assert code == 0
        output = capsys.readouterr().out
        assert "robot_1 -> robot_1/camera" in output
        assert "0.1" in output

    def test_unavailable(self, tmp_path, seed_yaml: str) -> None:
        """Test the exit code of an unreachable pair."""
        path = tmp_path / "seed.yaml"
        path.write_text(seed_yaml)

        assert main(["--config", str(path), "--source", "robot_1", "--target", "robot_2"]) == 1

    def test_malformed_config(self, tmp_path) -> None:
        """Test that a broken document aborts with exit code 2."""
        path = tmp_path / "seed.yaml"
        path.write_text("markers: []\n")

        assert main(["--config", str(path), "--source", "a", "--target", "b"]) == 2

    def test_scalar_section(self, tmp_path) -> None:
        """Test that a section given as a scalar aborts with exit code 2."""
        path = tmp_path / "seed.yaml"
        path.write_text("entities:\n  - name: a\n    sensors: 3\nmarkers: []\n")

        assert main(["--config", str(path), "--source", "a", "--target", "a"]) == 2

    def test_invalid_override(self, tmp_path, seed_yaml: str) -> None:
        """Test that out-of-range overrides are rejected."""
        path = tmp_path / "seed.yaml"
        path.write_text(seed_yaml)

        args = ["--config", str(path), "--source", "robot_1", "--target", "robot_2"]
        assert main(args + ["--alpha", "0"]) == 2
