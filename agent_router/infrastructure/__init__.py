"""Infrastructure layer exports."""

from .documents import DocumentStore, InMemoryDocumentStore
from .firestore import FirestoreDocumentStore
from .gcp_auth import GoogleCredentialsAuth, StaticTokenAuth, resolve_gcp_auth
from .workflows import MockWorkflowsClient, WorkflowExecution, WorkflowExecutionsClient, WorkflowsClient

__all__ = [
    "DocumentStore",
    "FirestoreDocumentStore",
    "GoogleCredentialsAuth",
    "InMemoryDocumentStore",
    "MockWorkflowsClient",
    "StaticTokenAuth",
    "WorkflowExecution",
    "WorkflowExecutionsClient",
    "WorkflowsClient",
    "resolve_gcp_auth",
]
