"""
Basic Usage Examples

Builds a single client on top of the core pipeline and reads items from
the Delivery API.
"""

import asyncio
import os
from typing import List, Optional

from kontent_ai_core import (
    ActionInvoker,
    ApiModel,
    ClientOptions,
    CoreServicesOptions,
    LoggingApiUsageListener,
    LoggingConfig,
    SdkIdentity,
    UnsuccessfulStatusError,
    create_client,
)


class ItemSystem(ApiModel):
    codename: str
    name: str
    type: str
    last_modified: Optional[str] = None


class ContentItem(ApiModel):
    system: ItemSystem


class ItemListing(ApiModel):
    items: List[ContentItem] = []


class DeliveryClient:
    """Tiny Delivery API client."""

    def __init__(self, options: ClientOptions, invoker: ActionInvoker):
        self.options = options
        self.invoker = invoker

    async def list_items(self, limit: int = 5) -> ItemListing:
        return await self.invoker.get(f"/{self.options.environment_id}/items?limit={limit}", ItemListing)

    async def get_item(self, codename: str) -> Optional[ContentItem]:
        return await self.invoker.get(f"/{self.options.environment_id}/items/{codename}", ContentItem)


async def main():
    options = ClientOptions(
        environment_id=os.environ.get("KONTENT_ENVIRONMENT_ID", "975bf280-fd91-488c-994c-2f04416e5ee3"),
        base_url="https://deliver.kontent.ai",
    )
    core_options = CoreServicesOptions(
        api_usage_listener=LoggingApiUsageListener(slow_request_threshold=2.0),
        sdk_identity=SdkIdentity("kontent-ai-delivery-example", "0.1.0"),
        logging=LoggingConfig.create(level="INFO"),
    )

    client = create_client(options, DeliveryClient, core_options)
    try:
        listing = await client.list_items()
        for item in listing.items:
            print(f"{item.system.codename:30} {item.system.type}")
    except UnsuccessfulStatusError as e:
        print(f"Request failed: {e}")
    finally:
        await client.invoker.http_client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
