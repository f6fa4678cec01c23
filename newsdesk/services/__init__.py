# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for one part of the domain:
#
#   article_service     - cached reads, writes and likes for Article
#   media_service       - cached reads of the media attached to articles
#   comment_service     - cached comment threads, posting and deletion
#   keyword_service     - the admin keyword pool and article links
#   user_service        - registration, login, profiles, roles
#   preference_service  - interests, dislikes, subscriptions, feed
#   engagement_service  - keyword read counters and interest promotion
#   cache_warmup        - startup prefetch of the cached reads
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.
