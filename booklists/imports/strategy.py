"""Resolution of import strategy overrides.

Precedence:
    list:  per-list override > global default
    book:  per-book override > global default
    field: per-book per-field choice > per-book field mode > global field mode
"""

from booklists.imports.merging import differing_fields
from booklists.imports.schemas import (
    BookAction,
    BookField,
    CommentMerge,
    ConflictInfo,
    FieldChoice,
    FieldMerge,
    ImportStrategy,
    ListAction,
)

DEFAULT_STRATEGY = ImportStrategy(
    default_list_action=ListAction.RENAME,
    default_book_action=BookAction.MERGE,
    default_comment_merge=CommentMerge.BOTH,
    default_field_merge=FieldMerge.NON_EMPTY,
)


def resolve_list_action(strategy: ImportStrategy, list_name: str) -> ListAction:
    override = strategy.list_overrides.get(list_name)
    if override and override.action:
        return override.action
    return strategy.default_list_action


def resolve_comment_merge(strategy: ImportStrategy, list_name: str) -> CommentMerge:
    override = strategy.list_overrides.get(list_name)
    if override and override.comment_merge:
        return override.comment_merge
    return strategy.default_comment_merge


def resolve_book_action(strategy: ImportStrategy, key: str) -> BookAction:
    resolution = strategy.book_resolutions.get(key)
    if resolution and resolution.action:
        return resolution.action
    return strategy.default_book_action


def resolve_field_mode(strategy: ImportStrategy, key: str) -> FieldMerge:
    resolution = strategy.book_resolutions.get(key)
    if resolution and resolution.field_merge:
        return resolution.field_merge
    return strategy.default_field_merge


def resolve_field_strategy(
    strategy: ImportStrategy, key: str, field: BookField
) -> FieldMerge | FieldChoice:
    """Effective merge rule for one field of one book.

    An explicit per-field choice other than ``unresolved`` wins; otherwise the
    book's field mode applies.
    """
    resolution = strategy.book_resolutions.get(key)
    if resolution:
        choice = resolution.field_strategies.get(field)
        if choice and choice != FieldChoice.UNRESOLVED:
            return choice
    return resolve_field_mode(strategy, key)


def is_detailed_mode(strategy: ImportStrategy) -> bool:
    """Whether the global defaults require per-field choices."""
    return (
        strategy.default_field_merge == FieldMerge.DETAILED
        and strategy.default_book_action == BookAction.MERGE
    )


def count_unresolved_conflicts(strategy: ImportStrategy, conflicts: ConflictInfo) -> int:
    """Count differing fields still waiting for a per-field choice.

    Only books that will be merged in detailed mode can have unresolved
    fields. The import must not run while this is non-zero.

    Args:
        strategy: Strategy the user is about to run.
        conflicts: Result of conflict detection for the same payload.

    Returns:
        Number of unresolved field conflicts across all books.
    """
    unresolved = 0
    for conflict in conflicts.book_conflicts:
        key = conflict.book_key
        if resolve_book_action(strategy, key) != BookAction.MERGE:
            continue
        if resolve_field_mode(strategy, key) != FieldMerge.DETAILED:
            continue

        resolution = strategy.book_resolutions.get(key)
        choices = resolution.field_strategies if resolution else {}
        for field in differing_fields(conflict.existing_book, conflict.imported_book):
            if choices.get(field, FieldChoice.UNRESOLVED) == FieldChoice.UNRESOLVED:
                unresolved += 1
    return unresolved
