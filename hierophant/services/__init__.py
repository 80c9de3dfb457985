"""Application services: provider gateway, conversation store, session and chat orchestration."""
