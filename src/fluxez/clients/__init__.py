"""Domain API Clients

One client per backend domain, all sharing the transport of the owning
``FluxezClient``:
- BaseAPIClient: Request helpers and client-side validation
- QueueClient: Message queues
- StorageClient: File storage
- EmailClient: Transactional and templated email
- CacheClient: Hosted key/value cache
- SearchClient: Full-text and vector search
- AnalyticsClient: Event tracking and analytics queries
- PaymentClient: Tenant billing
- BrainClient: AI generation (``brain`` and ``ai``)
- WorkflowClient: Workflow automation
- AuthClient: Tenant end-user authentication
- SchemaClient: Table and migration management
- ChatbotClient: Chatbots and knowledge bases
- RealtimeClient: Presence channels
- PushClient: Push notifications and devices
- VideoClient: Video rooms, recordings and egress
- DocumentsClient: PDF processing and OCR
- EdgeFunctionsClient: Serverless edge functions
"""

from .analytics_client import AnalyticsClient
from .auth_client import AuthClient
from .base_client import BaseAPIClient
from .brain_client import BrainClient
from .cache_client import CacheClient
from .chatbot_client import ChatbotClient
from .documents_client import DocumentsClient
from .edge_functions_client import EdgeFunctionsClient
from .email_client import EmailClient
from .payment_client import PaymentClient
from .push_client import PushClient
from .queue_client import QueueClient
from .realtime_client import RealtimeClient
from .schema_client import SchemaClient
from .search_client import SearchClient
from .storage_client import StorageClient
from .video_client import VideoClient
from .workflow_client import WorkflowClient

__all__ = [
    "BaseAPIClient",
    "QueueClient",
    "StorageClient",
    "EmailClient",
    "CacheClient",
    "SearchClient",
    "AnalyticsClient",
    "PaymentClient",
    "BrainClient",
    "WorkflowClient",
    "AuthClient",
    "SchemaClient",
    "ChatbotClient",
    "RealtimeClient",
    "PushClient",
    "VideoClient",
    "DocumentsClient",
    "EdgeFunctionsClient",
]
