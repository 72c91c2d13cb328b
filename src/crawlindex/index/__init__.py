"""Full-text storage, search and the indexing pipeline."""
