"""
alignlab - Network alignment benchmarking and tuning.

Score methods across graph pairs, calibrate objectives, sweep parameters.
"""

from alignlab.experiment import Experiment
from alignlab.factory import build_method
from alignlab.sweep import ParameterSweep

__version__ = "0.2.0"
__all__ = ["Experiment", "ParameterSweep", "build_method", "__version__"]
