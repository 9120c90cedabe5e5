"""Deployment through the remote CLI session bridge."""
from .session import DeployError, DeployResult, RemoteSessionClient, deploy_script

__all__ = ["DeployError", "DeployResult", "RemoteSessionClient", "deploy_script"]
