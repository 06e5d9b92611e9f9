"""App-only Microsoft Graph client for directory and Intune calls.

The app registration needs GroupMember.ReadWrite.All, User.Read.All and
Device.Read.All, plus DeviceManagementManagedDevices.PrivilegedOperations.All
for remote device actions.
"""

from azure.identity import ClientSecretCredential
from msgraph import GraphServiceClient

from fleetadmin.core.config import get_graph_credentials

GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]


def get_credential() -> ClientSecretCredential:
    """Build the client-secret credential from MS_GRAPH_* settings.

    Raises:
        ValueError: If Graph credentials are not configured
    """
    tenant_id, client_id, client_secret = get_graph_credentials()
    return ClientSecretCredential(
        tenant_id=tenant_id,
        client_id=client_id,
        client_secret=client_secret,
    )


def get_graph_client(credential: ClientSecretCredential | None = None) -> GraphServiceClient:
    """Create a Graph client using the client credentials flow.

    Args:
        credential: Existing credential to share between clients; built
            from the environment when omitted

    Returns:
        Authenticated GraphServiceClient instance
    """
    return GraphServiceClient(credentials=credential or get_credential(), scopes=GRAPH_SCOPES)
