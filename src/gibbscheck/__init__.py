"""Gibbs sampling of small bipolar RBMs checked against exact enumeration."""

from .encoding import JOINT_SEPARATOR, decode, encode, index_to_string, random_bipolar
from .exact import ExactDistribution, ExactEnumerator
from .experiments import EXPERIMENTS, ExperimentResult, run_experiment
from .gibbs import GibbsDriver
from .histogram import Histogram, total_variation
from .model import RBM, plus_probability
from .sampler import ConditionalSampler

__version__ = "0.1.0"
