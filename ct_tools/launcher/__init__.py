"""
Pattern launcher: history, file browsing and deployment.
"""

from .browser import PatternBrowser
from .deploy import Deployer, DeployResult, DeployStatus, extract_charm_id, report_result
from .history import cull_missing, record_usage, recent_directories, recent_patterns

__all__ = [
    'PatternBrowser',
    'Deployer',
    'DeployResult',
    'DeployStatus',
    'extract_charm_id',
    'report_result',
    'cull_missing',
    'record_usage',
    'recent_directories',
    'recent_patterns',
]
