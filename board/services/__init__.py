# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single domain aggregate:
#
#   post_service     — CRUD + ownership checks + paging for Post, and likes
#   comment_service  — comments with per-post commenter ordinals
#   account_service  — registration, login, email/nickname availability
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Failures are raised as board.exceptions types.
