"""Taskflow: task assignment with two-stage approval and role-hierarchy authorization."""
