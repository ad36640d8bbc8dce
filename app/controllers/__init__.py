"""
Controllers - MVC2 Pattern
All controllers (routes) organized by layer
"""
from app.controllers import nlq_controller
from app.controllers import dashboard_controller

__all__ = [
    "nlq_controller",
    "dashboard_controller",
]
