"""
Deploy Engine Package
Orchestrates deploy scripts against a configured network
"""

from .deploy_engine import DeployEngine
from .environment import DeployEnvironment
from .script_manager import ScriptManager, DeployScript

__all__ = ['DeployEngine', 'DeployEnvironment', 'ScriptManager', 'DeployScript']
