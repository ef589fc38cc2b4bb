import matplotlib

matplotlib.use("Agg")

import pytest

from generator import format_step_line, generate_demo_trace
from aggregator import analyze_text
from datetime import datetime


@pytest.fixture
def step_line():
    return format_step_line


@pytest.fixture
def demo_text():
    return "\n".join(generate_demo_trace())


@pytest.fixture
def sample_result():
    lines = [
        format_step_line("Success", datetime(2024, 1, 2, 3, 5, 0), "Step B"),
        format_step_line("Error", datetime(2024, 1, 2, 3, 4, 5, 6000), "Step A <failed>", "80004005"),
        format_step_line("Warning", datetime(2024, 1, 2, 3, 6, 0), "Reboot; pending, 'soon'"),
    ]
    return analyze_text("\n".join(lines))
