"""Entra ID directory access through Microsoft Graph."""

import logging

from kiota_abstractions.api_error import APIError
from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph import GraphServiceClient
from msgraph.generated.devices.devices_request_builder import DevicesRequestBuilder
from msgraph.generated.groups.groups_request_builder import GroupsRequestBuilder
from msgraph.generated.models.reference_create import ReferenceCreate
from msgraph.generated.users.users_request_builder import UsersRequestBuilder

from fleetadmin.core.msgraph_client import get_graph_client
from fleetadmin.core.normalize import escape_odata, is_guid
from fleetadmin.directory.models import (
    DirectoryGroup,
    MutationResult,
    Principal,
    PrincipalKind,
)

logger = logging.getLogger(__name__)

USER_SELECT = [
    "id",
    "displayName",
    "userPrincipalName",
    "mail",
    "employeeId",
    "department",
    "onPremisesSamAccountName",
]

DEVICE_SELECT = [
    "id",
    "displayName",
    "deviceId",
    "trustType",
    "operatingSystem",
]

DIRECTORY_OBJECT_URL = "https://graph.microsoft.com/v1.0/directoryObjects/{}"


def _is_not_found(error: APIError) -> bool:
    return getattr(error, "response_status_code", None) == 404


class GraphDirectoryClient:
    """Resolve principals and manage group membership in Entra ID."""

    def __init__(self, client: GraphServiceClient | None = None) -> None:
        """Initialize the directory client.

        Args:
            client: Graph client to use (defaults to an app-only client
                built from environment credentials)
        """
        self.client: GraphServiceClient = client or get_graph_client()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve_principal(self, identifier: str, kind: PrincipalKind) -> Principal | None:
        """Resolve an identifier to a user or device.

        Users: object ID, then UPN (falling back to mail) for identifiers
        containing "@", otherwise UPN then on-premises SamAccountName.
        Devices: object ID, otherwise display name. Exact matches only.

        Args:
            identifier: Identifier as typed by the user
            kind: Kind of principal to resolve

        Returns:
            Principal, or None if nothing matched
        """
        identifier = identifier.strip()
        if kind is PrincipalKind.DEVICE:
            return await self._resolve_device(identifier)
        return await self._resolve_user(identifier)

    async def _resolve_user(self, identifier: str) -> Principal | None:
        if is_guid(identifier):
            try:
                user = await self.client.users.by_user_id(identifier).get()
            except APIError as e:
                if _is_not_found(e):
                    logger.debug(f"User not found by ID: {identifier}")
                    return None
                raise
            return self._user_to_principal(user) if user else None

        value = escape_odata(identifier)
        if "@" in identifier:
            filters = [f"userPrincipalName eq '{value}'", f"mail eq '{value}'"]
        else:
            filters = [f"userPrincipalName eq '{value}'", f"onPremisesSamAccountName eq '{value}'"]

        for odata_filter in filters:
            user = await self._find_user(odata_filter)
            if user:
                return user

        logger.debug(f"User not found: {identifier}")
        return None

    async def _find_user(self, odata_filter: str) -> Principal | None:
        query_params = UsersRequestBuilder.UsersRequestBuilderGetQueryParameters(
            filter=odata_filter,
            select=USER_SELECT,
            count=True,
        )
        config = RequestConfiguration(query_parameters=query_params)
        # onPremisesSamAccountName is only filterable as an advanced query
        config.headers.add("ConsistencyLevel", "eventual")

        result = await self.client.users.get(request_configuration=config)
        if result and result.value:
            return self._user_to_principal(result.value[0])
        return None

    async def _resolve_device(self, identifier: str) -> Principal | None:
        if is_guid(identifier):
            try:
                device = await self.client.devices.by_device_id(identifier).get()
            except APIError as e:
                if _is_not_found(e):
                    logger.debug(f"Device not found by ID: {identifier}")
                    return None
                raise
            return self._device_to_principal(device) if device else None

        query_params = DevicesRequestBuilder.DevicesRequestBuilderGetQueryParameters(
            filter=f"displayName eq '{escape_odata(identifier)}'",
            select=DEVICE_SELECT,
        )
        config = RequestConfiguration(query_parameters=query_params)
        result = await self.client.devices.get(request_configuration=config)

        if not result or not result.value:
            logger.debug(f"Device not found: {identifier}")
            return None

        if len(result.value) > 1:
            logger.warning(
                f"{len(result.value)} devices named {identifier}; using {result.value[0].id}"
            )
        return self._device_to_principal(result.value[0])

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def list_members(self, group_id: str, kind: PrincipalKind) -> list[Principal]:
        """Get the members of a group of the given kind.

        Args:
            group_id: The group ID
            kind: Only members of this kind are returned

        Returns:
            List of Principal objects
        """
        members_builder = self.client.groups.by_group_id(group_id).members
        result = await members_builder.get()

        principals: list[Principal] = []
        if result and result.value:
            principals.extend(self._members_of_kind(result.value, kind))

        # Handle pagination
        while result and result.odata_next_link:
            result = await members_builder.with_url(result.odata_next_link).get()
            if result and result.value:
                principals.extend(self._members_of_kind(result.value, kind))

        logger.info(f"Group {group_id} has {len(principals)} {kind.label}")
        return principals

    def _members_of_kind(self, members: list, kind: PrincipalKind) -> list[Principal]:
        principals = []
        for member in members:
            if not member.id or member.odata_type != kind.odata_type:
                continue
            if kind is PrincipalKind.DEVICE:
                principals.append(self._device_to_principal(member))
            else:
                principals.append(self._user_to_principal(member))
        return principals

    async def add_member(self, group_id: str, principal_id: str) -> MutationResult:
        """Add a user or device to a group.

        Args:
            group_id: The group ID
            principal_id: Directory object ID to add

        Returns:
            MutationResult carrying the error message on failure
        """
        request_body = ReferenceCreate(
            odata_id=DIRECTORY_OBJECT_URL.format(principal_id),
        )

        try:
            await self.client.groups.by_group_id(group_id).members.ref.post(request_body)
            logger.debug(f"Added {principal_id} to group {group_id}")
            return MutationResult.success()
        except Exception as e:
            logger.error(f"Failed to add {principal_id} to group {group_id}: {e}")
            return MutationResult.failure(str(e))

    async def remove_member(self, group_id: str, principal_id: str) -> MutationResult:
        """Remove a user or device from a group.

        Args:
            group_id: The group ID
            principal_id: Directory object ID to remove

        Returns:
            MutationResult carrying the error message on failure
        """
        try:
            await (
                self.client.groups.by_group_id(group_id)
                .members.by_directory_object_id(principal_id)
                .ref.delete()
            )
            logger.debug(f"Removed {principal_id} from group {group_id}")
            return MutationResult.success()
        except Exception as e:
            logger.error(f"Failed to remove {principal_id} from group {group_id}: {e}")
            return MutationResult.failure(str(e))

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    async def get_group(self, group_id: str) -> DirectoryGroup | None:
        """Fetch a group by object ID.

        Returns:
            DirectoryGroup, or None if the group does not exist
        """
        try:
            group = await self.client.groups.by_group_id(group_id).get()
        except APIError as e:
            if _is_not_found(e):
                return None
            raise
        if not group:
            return None
        return DirectoryGroup(
            id=group.id or group_id,
            display_name=group.display_name or "",
            description=group.description,
        )

    async def get_group_by_name(self, display_name: str) -> DirectoryGroup | None:
        """Find a group by display name.

        Args:
            display_name: The display name to search for

        Returns:
            DirectoryGroup if found, None otherwise
        """
        query_params = GroupsRequestBuilder.GroupsRequestBuilderGetQueryParameters(
            filter=f"displayName eq '{escape_odata(display_name)}'",
            select=["id", "displayName", "description"],
        )
        config = RequestConfiguration(query_parameters=query_params)

        result = await self.client.groups.get(request_configuration=config)
        if not result or not result.value:
            return None

        if len(result.value) > 1:
            logger.warning(f"{len(result.value)} groups named {display_name}; using the first")

        group = result.value[0]
        return DirectoryGroup(
            id=group.id or "",
            display_name=group.display_name or display_name,
            description=group.description,
        )

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _user_to_principal(self, user) -> Principal:
        """Convert an MS Graph User to a Principal."""
        return Principal(
            id=user.id or "",
            display_name=user.display_name or "",
            kind=PrincipalKind.USER,
            upn=user.user_principal_name,
            mail=user.mail,
            employee_id=getattr(user, "employee_id", None),
            department=getattr(user, "department", None),
        )

    def _device_to_principal(self, device) -> Principal:
        """Convert an MS Graph Device to a Principal."""
        return Principal(
            id=device.id or "",
            display_name=device.display_name or "",
            kind=PrincipalKind.DEVICE,
            device_name=device.display_name,
            trust_type=getattr(device, "trust_type", None),
        )
