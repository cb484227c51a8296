"""
Google Drive MCP Tools

This module provides MCP tools for finding, creating and organising Google
Docs and folders through the Drive v3 API.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from auth.services import GoogleServices
from core.utils import handle_http_errors
from gdocs.docs_helpers import create_insert_text_request
from gdocs.errors import DocumentApiError
from gdocs.managers import BatchOperationManager

logger = logging.getLogger(__name__)

DOCUMENT_MIME_TYPE = "application/vnd.google-apps.document"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

MAX_LIST_RESULTS = 100


def _escape_query_value(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


async def _list_google_docs_impl(
    drive_service, max_results: int = 20, query: Optional[str] = None
) -> str:
    """Implementation for listing the user's Google Docs, newest first."""
    logger.info(f"[list_google_docs] Invoked. max_results={max_results}, query='{query}'")

    page_size = max(1, min(MAX_LIST_RESULTS, max_results))
    q = f"mimeType='{DOCUMENT_MIME_TYPE}' and trashed=false"
    if query:
        escaped_query = _escape_query_value(query)
        q += f" and (name contains '{escaped_query}' or fullText contains '{escaped_query}')"

    response = await asyncio.to_thread(
        drive_service.files()
        .list(
            q=q,
            pageSize=page_size,
            orderBy="modifiedTime desc",
            fields="files(id,name,modifiedTime,webViewLink,owners(displayName))",
        )
        .execute
    )
    files = response.get("files", [])
    if not files:
        return "No Google Docs found matching your criteria."

    output = [f"Found {len(files)} Google Document(s):", ""]
    for position, f in enumerate(files, start=1):
        modified = (f.get("modifiedTime") or "Unknown").split("T")[0]
        owners = f.get("owners") or [{}]
        owner = owners[0].get("displayName", "Unknown")
        output.append(f"{position}. **{f.get('name')}**")
        output.append(f"   ID: {f.get('id')}")
        output.append(f"   Modified: {modified}")
        output.append(f"   Owner: {owner}")
        output.append(f"   Link: {f.get('webViewLink')}")
        output.append("")
    return "\n".join(output)


async def _create_document_impl(
    drive_service, docs_service, title: str, initial_content: Optional[str] = None
) -> str:
    """
    Implementation for creating a new Google Doc.

    A failure while adding initial_content is reported in the result; the
    document itself has already been created at that point.
    """
    logger.info(f"[create_document] Invoked. Title='{title}'")

    document = await asyncio.to_thread(
        drive_service.files()
        .create(
            body={"name": title, "mimeType": DOCUMENT_MIME_TYPE},
            fields="id,name,webViewLink",
        )
        .execute
    )
    document_id = document.get("id")
    result = (
        f'Successfully created document "{document.get("name")}" (ID: {document_id})\n'
        f"View Link: {document.get('webViewLink')}"
    )

    if initial_content:
        try:
            await BatchOperationManager(docs_service).apply_updates(
                document_id, [create_insert_text_request(1, initial_content)]
            )
            result += "\n\nInitial content added to document."
        except DocumentApiError as e:
            logger.warning(f"[create_document] Could not add initial content to {document_id}: {e}")
            result += (
                "\n\nDocument created but failed to add initial content. "
                "You can add content manually."
            )

    return result


async def _create_from_template_impl(
    drive_service, template_id: str, new_name: str, parent_folder_id: Optional[str] = None
) -> str:
    """Implementation for copying a template document."""
    logger.info(f"[create_from_template] Invoked. Template ID: '{template_id}', name='{new_name}'")

    body: Dict[str, Any] = {"name": new_name}
    if parent_folder_id:
        body["parents"] = [parent_folder_id]

    document = await asyncio.to_thread(
        drive_service.files()
        .copy(fileId=template_id, body=body, fields="id,name,webViewLink")
        .execute
    )
    return f"Document created from template: {json.dumps(document, indent=2)}"


async def _get_document_info_impl(drive_service, file_id: str) -> str:
    """Implementation for reading Drive metadata of a file."""
    logger.info(f"[get_document_info] Invoked. File ID: '{file_id}'")

    file_metadata = await asyncio.to_thread(
        drive_service.files()
        .get(
            fileId=file_id,
            fields="id,name,mimeType,createdTime,modifiedTime,owners,webViewLink,parents",
        )
        .execute
    )
    return json.dumps(file_metadata, indent=2)


async def _create_folder_impl(
    drive_service, name: str, parent_folder_id: Optional[str] = None
) -> str:
    """Implementation for creating a Drive folder."""
    logger.info(f"[create_folder] Invoked. Name='{name}', parent='{parent_folder_id}'")

    body: Dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME_TYPE}
    if parent_folder_id:
        body["parents"] = [parent_folder_id]

    folder = await asyncio.to_thread(
        drive_service.files().create(body=body, fields="id,name,webViewLink").execute
    )
    return f"Folder created successfully: {json.dumps(folder, indent=2)}"


async def _list_folder_contents_impl(drive_service, folder_id: str) -> str:
    """Implementation for listing the files in a folder, folders first."""
    logger.info(f"[list_folder_contents] Invoked. Folder ID: '{folder_id}'")

    response = await asyncio.to_thread(
        drive_service.files()
        .list(
            q=f"'{_escape_query_value(folder_id)}' in parents and trashed=false",
            fields="files(id,name,mimeType,modifiedTime)",
            orderBy="folder,name",
        )
        .execute
    )
    files = response.get("files", [])
    return f"Contents of folder {folder_id}:\n{json.dumps(files, indent=2)}"


async def _move_file_impl(drive_service, file_id: str, destination_folder_id: str) -> str:
    """Implementation for moving a file by replacing all of its parents."""
    logger.info(f"[move_file] Invoked. File ID: '{file_id}', destination: '{destination_folder_id}'")

    current = await asyncio.to_thread(
        drive_service.files().get(fileId=file_id, fields="parents").execute
    )
    previous_parents = ",".join(current.get("parents", []))

    moved = await asyncio.to_thread(
        drive_service.files()
        .update(
            fileId=file_id,
            addParents=destination_folder_id,
            removeParents=previous_parents,
            fields="id,name,parents",
        )
        .execute
    )
    return f"File moved successfully: {json.dumps(moved, indent=2)}"


async def _copy_file_impl(
    drive_service, file_id: str, new_name: str, destination_folder_id: Optional[str] = None
) -> str:
    """Implementation for copying a file."""
    logger.info(f"[copy_file] Invoked. File ID: '{file_id}', new name='{new_name}'")

    body: Dict[str, Any] = {"name": new_name}
    if destination_folder_id:
        body["parents"] = [destination_folder_id]

    copied = await asyncio.to_thread(
        drive_service.files()
        .copy(fileId=file_id, body=body, fields="id,name,webViewLink,parents")
        .execute
    )
    return f"File copied successfully: {json.dumps(copied, indent=2)}"


async def _rename_file_impl(drive_service, file_id: str, new_name: str) -> str:
    """Implementation for renaming a file."""
    logger.info(f"[rename_file] Invoked. File ID: '{file_id}', new name='{new_name}'")

    renamed = await asyncio.to_thread(
        drive_service.files()
        .update(fileId=file_id, body={"name": new_name}, fields="id,name")
        .execute
    )
    return f"File renamed successfully: {json.dumps(renamed, indent=2)}"


async def _delete_file_impl(drive_service, file_id: str) -> str:
    """Implementation for moving a file to the trash."""
    logger.info(f"[delete_file] Invoked. File ID: '{file_id}'")

    await asyncio.to_thread(
        drive_service.files().update(fileId=file_id, body={"trashed": True}).execute
    )
    return f"File with ID {file_id} moved to trash."


def register_drive_tools(server, services: GoogleServices) -> Dict[str, Any]:
    """
    Register the Google Drive tools on a FastMCP server.

    Args:
        server: FastMCP server instance
        services: Authorized Google API clients

    Returns:
        Dict of the registered tool functions, keyed by tool name
    """
    drive_service = services.drive

    @handle_http_errors("list_google_docs", service_type="drive")
    async def list_google_docs(max_results: int = 20, query: Optional[str] = None) -> str:
        """
        Lists Google Docs in your Drive, most recently modified first.

        Args:
            max_results: Maximum number of documents to return (1-100).
            query: Optional text to match against document names and content.
        """
        return await _list_google_docs_impl(drive_service, max_results, query)

    @handle_http_errors("create_document", service_type="drive")
    async def create_document(title: str, initial_content: Optional[str] = None) -> str:
        """
        Creates a new Google Document.

        Args:
            title: Title of the new document.
            initial_content: Optional text to put in the new document.
        """
        return await _create_document_impl(drive_service, services.docs, title, initial_content)

    @handle_http_errors("create_from_template", service_type="drive")
    async def create_from_template(
        template_id: str, new_name: str, parent_folder_id: Optional[str] = None
    ) -> str:
        """
        Creates a new document by copying a template document.

        Args:
            template_id: ID of the template document.
            new_name: Name for the new document.
            parent_folder_id: Optional folder to create the document in.
        """
        return await _create_from_template_impl(drive_service, template_id, new_name, parent_folder_id)

    @handle_http_errors("get_document_info", service_type="drive")
    async def get_document_info(file_id: str) -> str:
        """
        Gets Drive metadata for a file: name, type, owners, dates, link and parents.

        Args:
            file_id: ID of the file.
        """
        return await _get_document_info_impl(drive_service, file_id)

    @handle_http_errors("create_folder", service_type="drive")
    async def create_folder(name: str, parent_folder_id: Optional[str] = None) -> str:
        """
        Creates a new folder in Google Drive.

        Args:
            name: Name of the folder.
            parent_folder_id: Optional parent folder ID (defaults to My Drive root).
        """
        return await _create_folder_impl(drive_service, name, parent_folder_id)

    @handle_http_errors("list_folder_contents", service_type="drive")
    async def list_folder_contents(folder_id: str) -> str:
        """
        Lists the files and folders inside a Drive folder.

        Args:
            folder_id: ID of the folder ("root" for My Drive).
        """
        return await _list_folder_contents_impl(drive_service, folder_id)

    @handle_http_errors("move_file", service_type="drive")
    async def move_file(file_id: str, destination_folder_id: str) -> str:
        """
        Moves a file to another folder.

        Args:
            file_id: ID of the file to move.
            destination_folder_id: ID of the destination folder.
        """
        return await _move_file_impl(drive_service, file_id, destination_folder_id)

    @handle_http_errors("copy_file", service_type="drive")
    async def copy_file(
        file_id: str, new_name: str, destination_folder_id: Optional[str] = None
    ) -> str:
        """
        Copies a file.

        Args:
            file_id: ID of the file to copy.
            new_name: Name for the copy.
            destination_folder_id: Optional folder for the copy.
        """
        return await _copy_file_impl(drive_service, file_id, new_name, destination_folder_id)

    @handle_http_errors("rename_file", service_type="drive")
    async def rename_file(file_id: str, new_name: str) -> str:
        """
        Renames a file.

        Args:
            file_id: ID of the file.
            new_name: The new name.
        """
        return await _rename_file_impl(drive_service, file_id, new_name)

    @handle_http_errors("delete_file", service_type="drive")
    async def delete_file(file_id: str) -> str:
        """
        Moves a file to the trash. It can be restored from the Drive trash.

        Args:
            file_id: ID of the file.
        """
        return await _delete_file_impl(drive_service, file_id)

    tools = {
        "list_google_docs": list_google_docs,
        "create_document": create_document,
        "create_from_template": create_from_template,
        "get_document_info": get_document_info,
        "create_folder": create_folder,
        "list_folder_contents": list_folder_contents,
        "move_file": move_file,
        "copy_file": copy_file,
        "rename_file": rename_file,
        "delete_file": delete_file,
    }
    for tool in tools.values():
        server.tool()(tool)
    return tools
