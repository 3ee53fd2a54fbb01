"""
Packaging Data Repository - packaging structures per product
"""
import logging
from typing import List, Optional

from ..api_client import ApiClient, ApiError
from ..errors import CommitFailure, ValidationError
from .models import PackagingStructure
from .validators import PackagingValidator

logger = logging.getLogger(__name__)


class PackagingData:
    """Repository for packaging structure access through the inventory API"""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()
        self.validator = PackagingValidator()

    def get_structures(self, product_id: str) -> List[PackagingStructure]:
        """Packaging structures defined for a product"""
        try:
            payload = self.client.get(f"/inventory/products/{product_id}/packaging-structures")
        except ApiError as e:
            logger.error(f"Error loading packaging structures for product {product_id}: {e}")
            return []

        return [PackagingStructure.from_dict(item) for item in payload or []]

    def create_structure(self, structure: PackagingStructure) -> PackagingStructure:
        """
        Create a packaging structure

        The definition is re-validated before anything is sent.

        Raises:
            ValidationError: malformed definition
            CommitFailure: API rejected or could not be reached
        """
        levels = [structure.level2, structure.level3, structure.level4]
        while levels and levels[-1] is None:
            levels.pop()

        errors = self.validator.validate_structure(structure.name, structure.base_unit.name, levels)
        if errors:
            raise ValidationError(errors)

        try:
            created = self.client.post('/inventory/packaging-structures', structure.to_create_payload())
        except ApiError as e:
            logger.error(f"Error creating packaging structure '{structure.name}': {e}")
            raise CommitFailure('Create packaging structure', structure.name, e) from e

        logger.info(f"Created packaging structure '{structure.name}' for product {structure.product_id}")

        if not created:
            return structure
        return PackagingStructure.from_dict(created)
