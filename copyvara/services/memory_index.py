"""
Memory index: derive granular memory items from documents.

Items are a pure function of their document. IDs are deterministic in the
document id, category and position, so rebuilding yields identical IDs.
"""

from collections import defaultdict

from copyvara.models.document import Document
from copyvara.models.memory import MemoryCategory, MemoryItem
from copyvara.utils.id_generator import generate_memory_item_id
from copyvara.utils.logger import get_logger
from copyvara.utils.timeutils import utc_now

logger = get_logger(__name__)

MAX_FACTS = 5
MAX_ACTIONS = 3
MAX_SEGMENTS = 5
MAX_MEMORY_ITEMS = 2000


def build_memory_items(document: Document) -> list[MemoryItem]:
    """
    Derive memory items from a single document.

    Produces, in order:
    - one summary item if summary text exists
    - up to 5 fact items, one per summary bullet
    - up to 3 action items, one per action-plan step ("step: description")
    - up to 5 segment items, tags extended with the segment topic

    Args:
        document: Source document

    Returns:
        Memory items (empty if the document has nothing to derive)
    """
    now = utc_now()
    tags = list(document.topic_tags)
    items: list[MemoryItem] = []

    def add(category: MemoryCategory, title: str, content: str, index: int | None = None,
            item_tags: list[str] | None = None) -> None:
        items.append(
            MemoryItem(
                id=generate_memory_item_id(document.id, category.value, index),
                document_id=document.id,
                title=title,
                category=category,
                content=content,
                tags=item_tags if item_tags is not None else list(tags),
                created_at=now,
                updated_at=now,
            )
        )

    if document.summary_text:
        add(MemoryCategory.SUMMARY, f"{document.title} 요약", document.summary_text)

    for idx, bullet in enumerate(document.summary_bullets[:MAX_FACTS]):
        add(MemoryCategory.FACT, f"{document.title} 핵심 포인트 {idx + 1}", bullet, idx)

    steps = document.action_plan.steps if document.action_plan else []
    for idx, step in enumerate(steps[:MAX_ACTIONS]):
        add(
            MemoryCategory.ACTION,
            f"{document.title} 실행 {idx + 1}",
            f"{step.step}: {step.description}",
            idx,
        )

    for idx, segment in enumerate(document.segments[:MAX_SEGMENTS]):
        add(
            MemoryCategory.SEGMENT,
            f"{document.title} / {segment.topic}",
            segment.content,
            idx,
            item_tags=[tag for tag in [*tags, segment.topic] if tag],
        )

    return items


def rebuild_all(documents: list[Document], max_items: int = MAX_MEMORY_ITEMS) -> list[MemoryItem]:
    """
    Rebuild the full memory item set from scratch.

    Documents are processed in the given order (newest first when loaded
    from a store) and the result is truncated to max_items, so items of the
    oldest documents are the ones dropped.

    Args:
        documents: Document collection
        max_items: Cap on the total number of items

    Returns:
        Concatenated memory items
    """
    items: list[MemoryItem] = []
    for document in documents:
        items.extend(build_memory_items(document))

    if len(items) > max_items:
        logger.warning(f"Memory index truncated from {len(items)} to {max_items} items")
        items = items[:max_items]

    return items


def replace_document_items(
    memory_items: list[MemoryItem], document: Document, max_items: int = MAX_MEMORY_ITEMS
) -> list[MemoryItem]:
    """
    Swap one document's items for a fresh derivation.

    New items go first, matching a newest-first collection.

    Args:
        memory_items: Current item set
        document: Document whose items are rebuilt

    Returns:
        New item list
    """
    kept = [item for item in memory_items if item.document_id != document.id]
    return (build_memory_items(document) + kept)[:max_items]


def group_by_document(memory_items: list[MemoryItem]) -> dict[str, list[MemoryItem]]:
    """Index memory items by owning document id, preserving order."""
    grouped: dict[str, list[MemoryItem]] = defaultdict(list)
    for item in memory_items:
        grouped[item.document_id].append(item)
    return dict(grouped)
