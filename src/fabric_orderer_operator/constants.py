"""Constants for the Fabric Orderer Operator."""

# API Group
API_GROUP = "fabric.hyperledger.org"
API_VERSION = "v1alpha1"

# Resource Kinds
KIND_ORDERER = "Orderer"
PLURAL_ORDERER = "orderers"

# Child resource kinds
KIND_SECRET = "Secret"
KIND_SERVICE = "Service"
KIND_STATEFUL_SET = "StatefulSet"

# Templates
TEMPLATE_SECRET = "orderer/orderer_secret.yaml"
TEMPLATE_SERVICE = "orderer/orderer_service.yaml"
TEMPLATE_STATEFUL_SET = "orderer/orderer_statefulset.yaml"

# Naming
SECRET_SUFFIX = "-secret"

# Labels
LABEL_APP = "k8s-app"

# Defaults for optional spec fields
DEFAULT_STORAGE_CLASS = "default"
DEFAULT_STORAGE_SIZE = "5Gi"
DEFAULT_IMAGE = "hyperledger/fabric-orderer:1.4.3"

# Identity label used when the sign certificate carries no organization
DEFAULT_MSP_ID = "SampleOrgMSPID"

# Fabric configuration shared by all nodes in a namespace
DEFAULT_FABRIC_CONFIGMAP = "fabric-configs"
DEFAULT_OPERATOR_NAMESPACE = "fabric-operator"

# Field Manager
FIELD_MANAGER = "fabric-orderer-operator"
CONTROLLER_NAME = "orderer-controller"

# Event Reasons
EVENT_REASON_SECRET_CREATED = "SecretCreated"
EVENT_REASON_SERVICE_CREATED = "ServiceCreated"
EVENT_REASON_STATEFUL_SET_CREATED = "StatefulSetCreated"
EVENT_REASON_ACCESS_POINT_ASSIGNED = "AccessPointAssigned"
