"""Tests for parameter sweeps."""

import csv
import os
import subprocess

import pytest
import yaml

from alignlab.config import AlignlabConfig
from alignlab.errors import ConfigError, SubmissionError
from alignlab.models.sweep import SweepSpec
from alignlab.sweep import GridPointState, ParameterSweep, format_value


def make_sweep(tmp_path, graph_loader=None, measure_loader=None, **overrides):
    data = {
        "measure": "literal",
        "g1": "yeast",
        "g2": "human",
        "k_values": [1, 2],
        "l_values": [0.5],
        "folder": str(tmp_path / "sweep"),
        **overrides,
    }
    spec = SweepSpec.model_validate(data)
    config = AlignlabConfig(precision_decimals=3, submit_command=["true"])
    return ParameterSweep(
        spec,
        config=config,
        graph_loader=graph_loader,
        measure_loader=measure_loader,
        workdir=tmp_path,
    )


def write_result(sweep, k, l, value):  # noqa: E741
    path = sweep.alignment_path(k, l)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"score {value}\n")


@pytest.fixture
def recorded_runs(monkeypatch):
    """Replace subprocess.run with a recorder that always succeeds."""
    calls = []

    def fake_run(argv, **kwargs):
        calls.append(argv)
        return subprocess.CompletedProcess(argv, 0, stdout="queued", stderr="")

    monkeypatch.setattr("alignlab.sweep.subprocess.run", fake_run)
    return calls


class TestSweepSpec:
    """Tests for the sweep file schema."""

    def test_duplicate_values_rejected(self):
        """Test grid values along an axis must be distinct."""
        with pytest.raises(ValueError, match="distinct"):
            SweepSpec.model_validate(
                {"measure": "ec", "g1": "a", "g2": "b", "k_values": [1, 1], "l_values": [2]}
            )

    def test_default_objective(self):
        """Test the swept measure is the default objective."""
        spec = SweepSpec.model_validate(
            {"measure": "s3", "g1": "a", "g2": "b", "k_values": [1], "l_values": [2]}
        )
        assert spec.objective_weights() == {"s3": 1.0}

    def test_folder_relative_to_file(self, tmp_path):
        """Test relative folders resolve against the sweep file."""
        path = tmp_path / "sweep.yaml"
        with path.open("w") as f:
            yaml.dump(
                {
                    "measure": "ec",
                    "g1": "a",
                    "g2": "b",
                    "k_values": [1],
                    "l_values": [2],
                    "folder": "out",
                },
                f,
            )
        assert SweepSpec.from_yaml(path).folder_path == tmp_path / "out"

    def test_invalid_yaml(self, tmp_path):
        """Test schema errors are reported as ConfigError."""
        path = tmp_path / "sweep.yaml"
        path.write_text("measure: ec\nk_values: [1]\n")
        with pytest.raises(ConfigError):
            SweepSpec.from_yaml(path)


class TestGrid:
    """Tests for grid point naming."""

    def test_distinct_names_and_paths(self, tmp_path):
        """Test each grid point gets its own script and output."""
        sweep = make_sweep(tmp_path)
        names = [p.script_name for p in sweep.points()]
        assert names == ["sana_yeast_human_k1.0_l0.5", "sana_yeast_human_k2.0_l0.5"]
        assert len({p.alignment_path for p in sweep.points()}) == 2

    def test_close_floats_stay_distinct(self, tmp_path):
        """Test nearby float values do not collide in file names."""
        sweep = make_sweep(tmp_path, k_values=[0.1, 0.1 + 1e-12])
        names = {p.script_name for p in sweep.points()}
        assert len(names) == 2

    def test_format_value(self):
        """Test grid values render as round-trippable floats."""
        assert format_value(2) == "2.0"
        assert float(format_value(0.1 + 0.2)) == 0.1 + 0.2

    def test_all_points_start_not_submitted(self, tmp_path):
        """Test the initial grid state."""
        sweep = make_sweep(tmp_path)
        assert all(p.state is GridPointState.NOT_SUBMITTED for p in sweep.points())
        assert all(p.score is None for p in sweep.points())


class TestSubmit:
    """Tests for script generation and submission."""

    def test_script_content(self, tmp_path):
        """Test the job script runs one alignment for its grid point."""
        sweep = make_sweep(
            tmp_path,
            k_option="tinitial",
            l_option="tdecay",
            options={"restart": False},
            objective={"ec": 0.5, "sequence": 0.5},
        )
        path = sweep.make_script(2, 0.5)
        text = path.read_text()

        assert text.startswith("#!/bin/bash\n")
        assert f"cd {tmp_path}" in text
        assert "alignlab align --g1 yeast --g2 human --method sana" in text
        assert "--set tinitial=2.0" in text
        assert "--set tdecay=0.5" in text
        assert "--set restart=false" in text
        assert "--measure ec=0.5 --measure sequence=0.5" in text
        assert str(sweep.alignment_path(2, 0.5)) in text
        assert os.access(path, os.X_OK)

    def test_submit_all_points(self, tmp_path, recorded_runs):
        """Test one submission per grid point with the configured command."""
        sweep = make_sweep(tmp_path)
        submitted = sweep.submit_scripts_to_cluster()

        assert len(submitted) == 2
        assert all(p.state is GridPointState.SUBMITTED for p in submitted)
        assert recorded_runs == [
            ["true", str(sweep.script_path(1, 0.5))],
            ["true", str(sweep.script_path(2, 0.5))],
        ]
        assert sweep.script_path(1, 0.5).exists()

    def test_submit_command_from_spec(self, tmp_path, recorded_runs):
        """Test the sweep file can override the submit command."""
        sweep = make_sweep(tmp_path, submit_command=["sbatch", "--parsable"])
        _ = sweep.submit_scripts_to_cluster()
        assert recorded_runs[0][:2] == ["sbatch", "--parsable"]

    def test_submit_failure(self, tmp_path):
        """Test a failing scheduler command is reported."""
        sweep = make_sweep(tmp_path, submit_command=["false"])
        with pytest.raises(SubmissionError, match="exited with 1"):
            sweep.submit_scripts_to_cluster()

    def test_submit_command_missing(self, tmp_path):
        """Test a scheduler command that cannot be started."""
        sweep = make_sweep(tmp_path, submit_command=[str(tmp_path / "no-qsub")])
        with pytest.raises(SubmissionError, match="Could not run"):
            sweep.submit_scripts_to_cluster()


class TestCollect:
    """Tests for result collection."""

    def test_partial_results(self, tmp_path, graph_loader, measure_loader, recorded_runs):
        """Test finished points are scored and the rest stay unresolved."""
        sweep = make_sweep(tmp_path, graph_loader, measure_loader)
        _ = sweep.submit_scripts_to_cluster()
        write_result(sweep, 1, 0.5, 0.7)

        _ = sweep.collect_data()
        done = sweep.point(1, 0.5)
        waiting = sweep.point(2, 0.5)
        assert done.score == pytest.approx(0.7)
        assert done.state is GridPointState.COMPLETED
        assert waiting.score is None
        assert waiting.state is GridPointState.PENDING

    def test_collect_without_submit(self, tmp_path, graph_loader, measure_loader):
        """Test collecting before any submission."""
        sweep = make_sweep(tmp_path, graph_loader, measure_loader)
        _ = sweep.collect_data()
        assert all(p.state is GridPointState.NOT_SUBMITTED for p in sweep.points())

    def test_collect_repeatable(self, tmp_path, graph_loader, measure_loader):
        """Test later collections pick up new results."""
        sweep = make_sweep(tmp_path, graph_loader, measure_loader)
        write_result(sweep, 1, 0.5, 0.7)
        _ = sweep.collect_data()
        assert sweep.point(2, 0.5).score is None

        write_result(sweep, 2, 0.5, 0.9)
        _ = sweep.collect_data()
        assert sweep.point(2, 0.5).score == pytest.approx(0.9)

    def test_csv_grid(self, tmp_path, graph_loader, measure_loader):
        """Test the CSV grid has k rows, l columns and placeholders."""
        sweep = make_sweep(tmp_path, graph_loader, measure_loader)
        write_result(sweep, 1, 0.5, 0.7)
        _ = sweep.collect_data()

        output = tmp_path / "grid.csv"
        sweep.print_data_csv(output)
        with output.open() as f:
            rows = list(csv.reader(f))
        assert rows == [["k\\l", "0.5"], ["1.0", "0.700"], ["2.0", "-"]]

    def test_text_grid(self, tmp_path, graph_loader, measure_loader):
        """Test the plain-text grid."""
        sweep = make_sweep(tmp_path, graph_loader, measure_loader)
        write_result(sweep, 2, 0.5, 0.25)
        _ = sweep.collect_data()

        output = tmp_path / "grid.txt"
        sweep.print_data(output)
        grid = {}
        for line in output.read_text(encoding="utf-8").splitlines():
            cells = [cell.strip() for cell in line.split("│")]
            if len(cells) == 4:
                grid[cells[1]] = cells[2]
        assert grid == {"1.0": "-", "2.0": "0.250"}

    def test_text_grid_keeps_wide_tables(self, tmp_path, graph_loader, measure_loader):
        """Test many l values still print every score in full."""
        l_values = [i / 100 for i in range(1, 21)]
        sweep = make_sweep(tmp_path, graph_loader, measure_loader, k_values=[1], l_values=l_values)
        for l in l_values:  # noqa: E741
            write_result(sweep, 1, l, 0.987654)
        _ = sweep.collect_data()

        output = tmp_path / "grid.txt"
        sweep.print_data(output)
        text = output.read_text(encoding="utf-8")
        assert text.count("0.988") == 20
        assert "…" not in text
