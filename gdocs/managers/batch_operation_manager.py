"""
Batch Operation Manager

This module sends Google Docs update requests to the API.

Features:
- Atomic batch execution (all requests succeed or all fail)
- API failures re-raised with the document ID attached
"""
import logging
import asyncio
from typing import Any, Dict, List

from googleapiclient.errors import HttpError

from gdocs.errors import DocumentApiError

logger = logging.getLogger(__name__)


class BatchOperationManager:
    """
    Sends update requests for one document in a single batchUpdate call.

    The Docs API applies a batch all-or-nothing, so the manager performs no
    retries and no partial-failure handling of its own.
    """

    def __init__(self, service):
        """
        Initialize the batch operation manager.

        Args:
            service: Google Docs API service instance
        """
        self.service = service

    async def apply_updates(
        self,
        document_id: str,
        requests: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """
        Apply update requests to a document in one atomic batchUpdate call.

        Args:
            document_id: ID of the document to update
            requests: Docs API request dictionaries, in execution order

        Returns:
            Raw batchUpdate response

        Raises:
            ValueError: If requests is empty
            DocumentApiError: If the API rejects the batch
        """
        if not requests:
            raise ValueError("apply_updates requires at least one request")

        logger.info(f"Applying {len(requests)} request(s) to document {document_id}")
        try:
            return await self._execute_batch_requests(document_id, requests)
        except HttpError as error:
            logger.error(f"batchUpdate failed for document {document_id}: {error}")
            raise DocumentApiError(document_id, error) from error

    async def _execute_batch_requests(
        self,
        document_id: str,
        requests: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """
        Execute the batch requests against the Google Docs API.

        Args:
            document_id: Document ID
            requests: List of API requests

        Returns:
            API response
        """
        return await asyncio.to_thread(
            self.service.documents().batchUpdate(
                documentId=document_id,
                body={'requests': requests}
            ).execute
        )
