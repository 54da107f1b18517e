"""
Credential resolution for the exec transport.

Loading and merging kubeconfig files is left to the kubernetes client;
this module only decides which source to use (explicit override, default
discovery, in-cluster) and turns failures into the error taxonomy.
"""

import logging

import yaml
from kubernetes import client
from kubernetes import config as kube_config
from kubernetes.config.config_exception import ConfigException

from gadgetctl import __version__
from gadgetctl.config import ClusterConfig
from gadgetctl.errors import ConfigResolutionFailed, TransportConstructionFailed

logger = logging.getLogger("gadgetctl.executor.credentials")

USER_AGENT = f"gadgetctl/{__version__}"


def load_rest_configuration(config: ClusterConfig) -> client.Configuration:
    """
    Resolve cluster credentials into a fresh client Configuration.

    With an explicit kubeconfig only that file is used. Otherwise the
    default discovery applies (KUBECONFIG, ~/.kube/config), falling back
    to the in-cluster service account.

    Raises:
        ConfigResolutionFailed: If no usable configuration could be loaded
    """
    configuration = client.Configuration()

    try:
        if config.has_explicit_kubeconfig:
            logger.debug(f"Loading kubeconfig from {config.kubeconfig}")
            kube_config.load_kube_config(
                config_file=config.kubeconfig,
                client_configuration=configuration,
                persist_config=False,
            )
            return configuration

        try:
            kube_config.load_kube_config(
                client_configuration=configuration,
                persist_config=False,
            )
            logger.debug("Loaded kubeconfig from default location")
        except ConfigException:
            kube_config.load_incluster_config(client_configuration=configuration)
            logger.debug("Loaded in-cluster Kubernetes configuration")
    except (ConfigException, OSError, yaml.YAMLError, TypeError, ValueError) as e:
        raise ConfigResolutionFailed(f"Failed to load Kubernetes configuration: {e}") from e

    return configuration


def build_rest_client(configuration: client.Configuration) -> client.CoreV1Api:
    """
    Build a CoreV1Api bound to ``configuration``.

    A dedicated ApiClient is created per call; the exec stream patches the
    client's request method while it runs, so it must not be shared.

    Raises:
        TransportConstructionFailed: If the client cannot be created
    """
    try:
        api_client = client.ApiClient(configuration=configuration)
        api_client.user_agent = USER_AGENT
    except (ValueError, TypeError, OSError) as e:
        raise TransportConstructionFailed(f"Failed to build REST client: {e}") from e

    return client.CoreV1Api(api_client)
