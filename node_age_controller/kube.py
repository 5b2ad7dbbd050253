"""Kubernetes API access for node reads, cordon updates and events."""

from datetime import datetime, timezone
from pathlib import Path

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from node_age_controller.exceptions import (
    ConfigurationError,
    ConflictError,
    NodeNotFoundError,
    TransientError,
)
from node_age_controller.logging_config import get_logger
from node_age_controller.models.node import Node, NodeSnapshot

logger = get_logger(__name__)

COMPONENT = "node-age-controller"
EVENT_NAMESPACE = "default"


def load_kube_config(kubeconfig: str | None = None) -> None:
    """Load kubeconfig, falling back to the in-cluster service account.

    Raises:
        ConfigurationError: If neither configuration source is usable
    """
    try:
        if kubeconfig:
            config.load_kube_config(config_file=str(Path(kubeconfig).expanduser()))
        else:
            config.load_kube_config()
        logger.debug("Loaded kubeconfig")
        return
    except (ConfigException, OSError) as e:
        if kubeconfig:
            raise ConfigurationError(
                f"Failed to load kubeconfig: {kubeconfig}",
                f"{e}\nCheck the path or unset --kubeconfig to use the in-cluster config.",
            )
        logger.debug(f"No usable kubeconfig ({e}), trying in-cluster config")

    try:
        config.load_incluster_config()
        logger.debug("Loaded in-cluster config")
    except ConfigException as e:
        raise ConfigurationError(
            "Failed to load Kubernetes configuration",
            f"{e}\nMake sure ~/.kube/config exists or run inside the cluster.",
        )


class KubernetesNodeClient:
    """Node get/list/update and event recording against the Kubernetes API."""

    def __init__(self, api: client.CoreV1Api, component: str = COMPONENT):
        """Initialize the node client.

        Args:
            api: CoreV1Api used for all requests
            component: Source component recorded on emitted events
        """
        self.api = api
        self.component = component

    @classmethod
    def from_kubeconfig(cls, kubeconfig: str | None = None) -> "KubernetesNodeClient":
        """Create a client from kubeconfig or the in-cluster config."""
        load_kube_config(kubeconfig)
        return cls(client.CoreV1Api())

    def get_node(self, name: str) -> Node:
        """Fetch a single node.

        Raises:
            NodeNotFoundError: If the node does not exist
            TransientError: For any other API or network failure
        """
        try:
            v1_node = self.api.read_node(name)
        except ApiException as e:
            if e.status == 404:
                raise NodeNotFoundError(f"Node {name} not found")
            raise TransientError(f"Failed to read node {name}", f"{e.status}: {e.reason}")
        except urllib3.exceptions.HTTPError as e:
            raise TransientError(f"Failed to read node {name}", str(e))

        return Node.from_kubernetes(v1_node)

    def list_nodes(self) -> NodeSnapshot:
        """List every node in the cluster.

        Raises:
            TransientError: For any API or network failure
        """
        try:
            v1_node_list = self.api.list_node()
        except ApiException as e:
            raise TransientError("Failed to list nodes", f"{e.status}: {e.reason}")
        except urllib3.exceptions.HTTPError as e:
            raise TransientError("Failed to list nodes", str(e))

        snapshot = NodeSnapshot.from_kubernetes(v1_node_list)
        logger.debug(f"Listed {len(snapshot.nodes)} nodes")
        return snapshot

    def update_node(self, node: Node) -> None:
        """Persist the node's schedulability.

        The patch carries the resource version the node was read at, so the API
        server rejects it if the node changed since.

        Raises:
            ConflictError: If the node was modified concurrently
            NodeNotFoundError: If the node was deleted
            TransientError: For any other API or network failure
        """
        body = {"spec": {"unschedulable": node.unschedulable}}
        if node.resource_version:
            body["metadata"] = {"resourceVersion": node.resource_version}

        try:
            self.api.patch_node(node.name, body)
        except ApiException as e:
            if e.status == 409:
                raise ConflictError(
                    f"Node {node.name} was modified concurrently",
                    f"Resource version {node.resource_version} is stale",
                )
            if e.status == 404:
                raise NodeNotFoundError(f"Node {node.name} not found")
            raise TransientError(f"Failed to update node {node.name}", f"{e.status}: {e.reason}")
        except urllib3.exceptions.HTTPError as e:
            raise TransientError(f"Failed to update node {node.name}", str(e))

        logger.debug(f"Updated node {node.name}: unschedulable={node.unschedulable}")

    def emit_event(self, kind: str, subject: str, message: str, uid: str | None = None) -> None:
        """Record a Normal event against a node. Failures are logged, never raised.

        Events are matched to their node by uid, so pass it whenever it is known.
        """
        now = datetime.now(timezone.utc)
        event = client.CoreV1Event(
            metadata=client.V1ObjectMeta(generate_name=f"{subject}."),
            involved_object=client.V1ObjectReference(
                api_version="v1", kind="Node", name=subject, uid=uid
            ),
            reason=kind,
            message=message,
            type="Normal",
            source=client.V1EventSource(component=self.component),
            reporting_component=self.component,
            first_timestamp=now,
            last_timestamp=now,
            count=1,
        )

        try:
            self.api.create_namespaced_event(EVENT_NAMESPACE, event)
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            logger.warning(f"Failed to record {kind} event for node {subject}: {e}")
