# httpload/__init__.py
from httpload.config import TestConfig, load_config, load_data
from httpload.dispatcher import Dispatcher, DispatchState, run_test
from httpload.metrics import RequestOutcome, TestMetrics
from httpload.plan import RequestDescriptor, build_plan

__version__ = "0.1.0"
