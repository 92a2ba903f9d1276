"""Ansible Provisioner — change detection and command composition for remote Ansible runs."""

__version__ = "0.1.0"
