"""Remote tag listing (GitHub GraphQL) filtered by monorepo prefix."""
