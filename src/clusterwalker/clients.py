from __future__ import annotations

from functools import lru_cache
from typing import Any

from google.cloud import compute_v1
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.config.config_exception import ConfigException

from .logger import logger

# Shared Client Registry (Lazy-loaded and cached)


@lru_cache(maxsize=1)
def get_instance_group_managers_client() -> Any:
    return compute_v1.InstanceGroupManagersClient()


@lru_cache(maxsize=4)
def get_core_v1_api(kubeconfig: str | None = None, context: str | None = None) -> Any:
    """
    Builds a CoreV1Api from the kubeconfig (default location when not given),
    falling back to the in-cluster service account.
    """
    try:
        api_client = k8s_config.new_client_from_config(
            config_file=kubeconfig, context=context
        )
    except ConfigException as e:
        if kubeconfig or context:
            raise
        logger.debug(f"No usable kubeconfig ({e}), trying in-cluster config")
        k8s_config.load_incluster_config()
        api_client = k8s_client.ApiClient()
    return k8s_client.CoreV1Api(api_client)
