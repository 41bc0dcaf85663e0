from __future__ import annotations

from decimal import Decimal

from blocksapi.config import Settings
from blocksapi.models import Attachment, User
from blocksapi.storage import InMemoryPlatform

EDITOR = User(id=1, login="editor", capabilities=["read", "edit_posts"])
CUSTOMER = User(id=2, login="customer", capabilities=["read"])


def build_platform(settings: Settings, products=(), attachments=()) -> InMemoryPlatform:
    platform = InMemoryPlatform(settings)
    for attachment in attachments:
        platform.media.add_attachment(attachment)
    for product in products:
        platform.catalog.add_product(product)
    platform.catalog.sync_parent_prices()
    return platform


def image(attachment_id: int, **kwargs) -> Attachment:
    values = dict(
        id=attachment_id,
        url="https://img.example/%d.jpg" % attachment_id,
        width=800,
        height=600,
        thumbnail_url="https://img.example/%d-thumb.jpg" % attachment_id,
        thumbnail_width=300,
        thumbnail_height=225,
        title="image-%d" % attachment_id,
        alt="Image %d" % attachment_id,
    )
    values.update(kwargs)
    return Attachment(**values)


def taxed_settings(**kwargs) -> Settings:
    values = dict(catalog_file=None, tax_display_shop="incl", tax_rate=Decimal("10"))
    values.update(kwargs)
    return Settings(**values)
