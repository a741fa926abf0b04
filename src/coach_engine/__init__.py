"""
coach-engine: adaptive weekly coaching decisions.

The library logs through loguru but stays silent until an application
opts in via core.logger.setup_logger().
"""

from loguru import logger

__version__ = "0.1.0"

logger.disable("coach_engine")
