from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError
from .schemas.cluster import ClusterSpec, DesiredGroup


class ClusterConfig(BaseModel):
    """Cluster descriptor: the cluster itself plus its desired instance groups."""

    cluster: ClusterSpec
    instance_groups: list[DesiredGroup] = Field(default_factory=list)


def load_cluster_config(path: str | Path) -> ClusterConfig:
    """
    Loads a YAML (or JSON) cluster descriptor, e.g.

        cluster:
          name: k8s.example.com
          api_host: https://api.k8s.example.com
          project: my-project
        instance_groups:
          - name: control-plane-us-central1-a
            role: control-plane
          - name: nodes
            role: node
            min_size: 3
    """
    path = Path(path)
    try:
        with path.open("r") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"{path} does not contain a cluster descriptor")

    try:
        return ClusterConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid cluster descriptor {path}:\n{e}") from e
