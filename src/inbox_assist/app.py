"""Application context: one place that builds and owns every component."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from inbox_assist.actions.hooks import LifecycleHooks
from inbox_assist.actions.orchestrator import ActionOrchestrator
from inbox_assist.actions.reply import ReplyInjector
from inbox_assist.config import AssistantConfig
from inbox_assist.context.extractor import ContextExtractor
from inbox_assist.context.threads import ThreadSource
from inbox_assist.host.base import HostItem, Mailbox
from inbox_assist.inference.client import AsyncInferenceClient

logger = logging.getLogger(__name__)


@dataclass
class AssistantApp:
    """Components of a running assistant, wired to one mailbox."""

    config: AssistantConfig
    mailbox: Mailbox
    client: AsyncInferenceClient
    extractor: ContextExtractor
    actions: ActionOrchestrator
    replies: ReplyInjector
    hooks: LifecycleHooks

    @classmethod
    def from_config(
        cls,
        config: AssistantConfig,
        mailbox: Mailbox,
        thread_source: ThreadSource | None = None,
        transport=None,
    ) -> AssistantApp:
        """Build client, extractor, orchestrator and reply injector, in that order."""
        hooks = LifecycleHooks()
        client = AsyncInferenceClient.from_config(config, transport=transport)
        extractor = ContextExtractor(config.context, thread_source=thread_source)
        actions = ActionOrchestrator(
            client,
            extractor,
            prompt_templates=config.prompt_templates,
            default_parameters=config.model.default_parameters,
            mailbox=mailbox,
            hooks=hooks,
        )
        replies = ReplyInjector(
            client,
            extractor,
            mailbox,
            prompt_templates=config.prompt_templates,
            default_parameters=config.model.default_parameters,
            include_thread=True,
            hooks=hooks,
            settle_delay=config.ui_settle_delay,
        )
        logger.info(f"Assistant initialized for {config.server.url} (model {config.model.name})")
        return cls(
            config=config,
            mailbox=mailbox,
            client=client,
            extractor=extractor,
            actions=actions,
            replies=replies,
            hooks=hooks,
        )

    @property
    def current_item(self) -> HostItem | None:
        return self.mailbox.item

    async def check_connection(self) -> bool:
        ready = await self.client.test_connection()
        if ready:
            logger.info("Inference server is ready")
        else:
            logger.warning(f"Inference server at {self.config.server.url} is not ready")
        return ready
