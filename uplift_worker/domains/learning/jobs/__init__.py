"""
Learning jobs, runnable for one shop or for every active shop
"""

from .daily_learning_job import run_daily_learning, run_daily_learning_for_all_shops
from .similarity_job import (
    run_similarity_computation,
    run_similarity_computation_for_all_shops,
)
from .profile_update_job import run_profile_update, run_profile_update_for_all_shops
from .attribution_job import run_order_attribution

__all__ = [
    "run_daily_learning",
    "run_daily_learning_for_all_shops",
    "run_similarity_computation",
    "run_similarity_computation_for_all_shops",
    "run_profile_update",
    "run_profile_update_for_all_shops",
    "run_order_attribution",
]
