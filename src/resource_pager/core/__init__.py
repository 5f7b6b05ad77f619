"""Core building blocks: transport, responses, URLs, logging and paging."""
