"""
Multiple Named Clients

Production and preview configurations for the same SDK client type,
with a custom resilience setup for preview.
"""

import asyncio

from kontent_ai_core import ActionInvoker, ClientFactoryBuilder, ClientOptions
from kontent_ai_core.resilience import TimeoutStrategy

ENVIRONMENT_ID = "975bf280-fd91-488c-994c-2f04416e5ee3"


class DeliveryClient:

    def __init__(self, options: ClientOptions, invoker: ActionInvoker):
        self.options = options
        self.invoker = invoker

    async def get_item(self, codename: str) -> dict:
        return await self.invoker.get(f"/{self.options.environment_id}/items/{codename}", dict)


def shorter_timeout(builder):
    builder.replace("timeout", TimeoutStrategy(5.0))


async def main():
    factory = (
        ClientFactoryBuilder(DeliveryClient)
        .add_client("production", ClientOptions(
            environment_id=ENVIRONMENT_ID,
            base_url="https://deliver.kontent.ai",
        ))
        .add_client("preview", lambda name: ClientOptions(
            environment_id=ENVIRONMENT_ID,
            base_url="https://preview-deliver.kontent.ai",
            api_key="<preview api key>",
            http_client_name=name,
        ), configure_resilience=shorter_timeout)
        .build()
    )

    async with factory:
        print("Registered:", factory.registered_client_names())

        production = factory.create_client("production")
        print("Production base URL:", production.options.base_url)

        preview = factory.options.get("preview")
        factory.options.set("preview", preview.with_api_key("<rotated preview api key>"))
        print("Preview HTTP client name:", factory.options.get("preview").http_client_name)


if __name__ == "__main__":
    asyncio.run(main())
