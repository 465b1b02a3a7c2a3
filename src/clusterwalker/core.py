from tenacity import stop_after_attempt, wait_exponential

# Shared retry configuration for collaborator API calls
# usage: @retry(**RETRY_CONFIG)
RETRY_CONFIG = {
    "stop": stop_after_attempt(3),
    "wait": wait_exponential(multiplier=1, min=4, max=10),
}

# Addresses the API DNS record points at until the control plane publishes
# its real address.
PLACEHOLDER_IP = "203.0.113.123"
PLACEHOLDER_IPV6 = "fd00:dead:add::"

# Only pods carrying one of these priority classes are validated.
CLUSTER_CRITICAL = "system-cluster-critical"
NODE_CRITICAL = "system-node-critical"
CRITICAL_PRIORITY_CLASSES = (CLUSTER_CRITICAL, NODE_CRITICAL)

SYSTEM_NAMESPACE = "kube-system"

# Static pods every control-plane node must run, matched on the k8s-app label.
CONTROL_PLANE_STATIC_PODS = (
    "kube-apiserver",
    "kube-controller-manager",
    "kube-scheduler",
)

# Well-known node / pod labels
LABEL_ZONE = "topology.kubernetes.io/zone"
LABEL_HOSTNAME = "kubernetes.io/hostname"
LABEL_CONTROL_PLANE = "node-role.kubernetes.io/control-plane"
LABEL_APP = "k8s-app"

# Page size used when streaming pods from the API server
POD_PAGE_SIZE = 500
