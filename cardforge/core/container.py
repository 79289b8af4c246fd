import asyncio
import logging
from typing import Optional

from redis.asyncio import Redis, RedisCluster
from redis.asyncio.cluster import ClusterNode

from cardforge.core.config import settings
from cardforge.domain.chatbot.base import ChatBot
from cardforge.domain.chatbot.factory import ChatBotFactory
from cardforge.domain.flashcard.config import GenerationConfig
from cardforge.domain.flashcard.generation import FlashcardGenerationService
from cardforge.domain.flashcard.service import FlashcardService
from cardforge.repositories.flashcard_repository import StorageFlashcardRepository
from cardforge.storage.base import StorageBackend
from cardforge.storage.memory import DictionaryBackend
from cardforge.storage.redis import RedisBackend

logger = logging.getLogger(__name__)


class StorageConnection:
    """Storage connection manager."""

    _instance: Optional[StorageBackend] = None
    _lock: asyncio.Lock = asyncio.Lock()

    @classmethod
    async def get_connection(cls) -> StorageBackend:
        """Get or create storage connection."""
        async with cls._lock:
            if cls._instance is None:
                try:
                    if settings.storage_type == "redis":
                        if settings.environment == "production":
                            nodes = [ClusterNode(host, port) for host, port in settings.redis_cluster_nodes]
                            redis_client = RedisCluster(
                                startup_nodes=nodes,
                                decode_responses=True,
                                max_connections=settings.redis_max_connections,
                            )
                        else:
                            redis_client = Redis(
                                host=settings.redis_host,
                                port=settings.redis_port,
                                decode_responses=True,
                                max_connections=settings.redis_max_connections,
                            )
                        # Verify connection before handing it out
                        await redis_client.ping()
                        cls._instance = RedisBackend(redis_client)
                    else:
                        cls._instance = DictionaryBackend()

                    logger.info(f"{settings.storage_type} storage connection established successfully")
                except Exception as e:
                    logger.error(f"Failed to establish storage connection: {e}")
                    raise
            return cls._instance

    @classmethod
    async def close(cls):
        """Close storage connection."""
        if cls._instance:
            if isinstance(cls._instance, RedisBackend):
                await cls._instance.redis.aclose()
            cls._instance = None
            logger.info("Storage connection closed")


class DependencyContainer:
    """Application-wide service instances, created on first use."""

    _chatbot: Optional[ChatBot] = None
    _generation_service: Optional[FlashcardGenerationService] = None
    _flashcard_service: Optional[FlashcardService] = None

    @classmethod
    def get_chatbot(cls) -> ChatBot:
        """Get or create the chatbot for the configured provider."""
        if cls._chatbot is None:
            cls._chatbot = ChatBotFactory.create(settings.llm_provider, settings)
            logger.info(f"Created {settings.llm_provider} chatbot")
        return cls._chatbot

    @classmethod
    def get_generation_service(cls) -> FlashcardGenerationService:
        if cls._generation_service is None:
            cls._generation_service = FlashcardGenerationService(
                chatbot=cls.get_chatbot(), config=GenerationConfig.from_settings(settings)
            )
            logger.info("Created new FlashcardGenerationService instance")
        return cls._generation_service

    @classmethod
    async def get_flashcard_service(cls) -> FlashcardService:
        if cls._flashcard_service is None:
            storage = await StorageConnection.get_connection()
            cls._flashcard_service = FlashcardService(StorageFlashcardRepository(storage))
            logger.info("Created new FlashcardService instance")
        return cls._flashcard_service

    @classmethod
    async def close(cls) -> None:
        if cls._chatbot is not None:
            await cls._chatbot.cleanup()
        cls._chatbot = None
        cls._generation_service = None
        cls._flashcard_service = None


# FastAPI dependencies
async def get_storage_or_none() -> Optional[StorageBackend]:
    """Dependency for the storage connection, None when it cannot be established."""
    try:
        return await StorageConnection.get_connection()
    except Exception as e:
        logger.warning(f"Storage unavailable: {e}")
        return None


async def get_generation_service() -> FlashcardGenerationService:
    """Dependency for getting the FlashcardGenerationService instance."""
    return DependencyContainer.get_generation_service()


async def get_flashcard_service() -> FlashcardService:
    """Dependency for getting the FlashcardService instance."""
    return await DependencyContainer.get_flashcard_service()


# Application lifecycle management
async def init_dependencies():
    """Initialize application dependencies."""
    try:
        logger.info("Initializing application dependencies...")
        await StorageConnection.get_connection()
        DependencyContainer.get_generation_service()
        await DependencyContainer.get_flashcard_service()
        logger.info("Dependencies initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize dependencies: {e}")
        raise


async def cleanup_dependencies():
    """Cleanup application dependencies."""
    try:
        logger.info("Cleaning up application dependencies...")
        await DependencyContainer.close()
        await StorageConnection.close()
        logger.info("Dependencies cleaned up successfully")
    except Exception as e:
        logger.error(f"Error during dependency cleanup: {e}")
        raise
