"""
FNFT Deployment
===============

Deployment orchestration for the FNFT contract family.

Structure:
- catalog: the ordered deployment plans
- orchestrator: runs a plan step by step, stopping at the first failure
- environment: ephemeral test network vs. persistent network setup
- steps: deploy + initialize a single contract
- gateway / dry_run: web3.py and in-memory contract gateways
- deploy_all: command line entry point
"""

__version__ = "1.0.0"
__author__ = "FNFT Team"
