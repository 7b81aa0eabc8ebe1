"""Business logic and id generation."""
