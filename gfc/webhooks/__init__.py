# Webhooks module - HTTP pipeline and handlers
