"""
Unit tests for image use cases.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from photohub.application.use_cases.image_use_cases import GetImageReferenceUseCase, GetImageUseCase
from photohub.domain.models.base import EntityNotFoundError, UnauthorizedToView, UnsupportedOperationError, Visibility
from photohub.domain.models.image import ImageFormat, ImageReference, ImageTransformOptions, UploadImage
from photohub.infrastructure.authz.policy_client import Decision
from photohub.infrastructure.repositories import InMemoryImageReferenceRepository
from photohub.infrastructure.storage import InMemoryImageStorage


@pytest.fixture
def image_enforcer():
    enforcer = Mock()
    enforcer.can_view = AsyncMock(return_value=Decision.ALLOW)
    enforcer.can_download = AsyncMock(return_value=Decision.ALLOW)
    enforcer.can_download_then_transform = AsyncMock(return_value=Decision.ALLOW)
    return enforcer


@pytest.fixture
def reference(user):
    return ImageReference(owner_user_id=user.id, url="http://localhost:8085/images/x", size=3,
                          format=ImageFormat.GIF, visibility=Visibility.PUBLIC)


class TestGetImageUseCase:
    """Test cases for downloading images."""

    @pytest.mark.asyncio
    async def test_plain_download(self, image_enforcer, reference, user):
        """Test that a download without options checks Download only."""
        storage = InMemoryImageStorage()
        await storage.upload_image(reference.id, UploadImage("x.gif", b"GIF", ImageFormat.GIF))
        use_case = GetImageUseCase(InMemoryImageReferenceRepository([reference]), storage, image_enforcer)

        image = await use_case.execute(user, reference.id)

        assert image.content == b"GIF"
        image_enforcer.can_download.assert_awaited_once()
        image_enforcer.can_download_then_transform.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transform_requires_transform_scope(self, image_enforcer, reference, user):
        """Test that requested transformations check Download and Transform."""
        storage = InMemoryImageStorage()
        await storage.upload_image(reference.id, UploadImage("x.gif", b"GIF", ImageFormat.GIF))
        image_enforcer.can_download_then_transform.return_value = Decision.DENY
        use_case = GetImageUseCase(InMemoryImageReferenceRepository([reference]), storage, image_enforcer)

        with pytest.raises(UnauthorizedToView):
            await use_case.execute(user, reference.id, ImageTransformOptions(huerotate=90))

        image_enforcer.can_download.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_authorized_transform_is_refused(self, image_enforcer, reference, user):
        """Test that an allowed transformation is rejected instead of returning the original bytes."""
        storage = InMemoryImageStorage()
        await storage.upload_image(reference.id, UploadImage("x.gif", b"GIF", ImageFormat.GIF))
        use_case = GetImageUseCase(InMemoryImageReferenceRepository([reference]), storage, image_enforcer)

        with pytest.raises(UnsupportedOperationError) as exc_info:
            await use_case.execute(user, reference.id, ImageTransformOptions(huerotate=90, thumbnail=(10, 10)))

        assert "huerotate" in exc_info.value.message
        assert "thumbnail" in exc_info.value.message
        image_enforcer.can_download_then_transform.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_bytes(self, image_enforcer, reference, user):
        """Test that a reference without stored bytes is not found."""
        use_case = GetImageUseCase(
            InMemoryImageReferenceRepository([reference]), InMemoryImageStorage(), image_enforcer
        )

        with pytest.raises(EntityNotFoundError):
            await use_case.execute(user, reference.id)


class TestGetImageReferenceUseCase:
    """Test cases for image metadata."""

    @pytest.mark.asyncio
    async def test_view_check(self, image_enforcer, reference, user):
        """Test that metadata needs the View scope."""
        use_case = GetImageReferenceUseCase(InMemoryImageReferenceRepository([reference]), image_enforcer)

        assert (await use_case.execute(user, reference.id)).id == reference.id
        image_enforcer.can_view.assert_awaited_once()
