"""
Larafleet - deployment configuration for Laravel applications on AWS ECS.

This package resolves the environment each service receives, builds the
s6-overlay supervision tree for worker containers and locates running
tasks for operational tooling (ssh, logs).
"""

__version__ = "0.1.0"
__author__ = "Larafleet"
