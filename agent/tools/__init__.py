from agent.tools.places import format_places, reconcile_points_of_interest

__all__ = ["format_places", "reconcile_points_of_interest"]
