"""
handlers/ - Presentation Layer
================================
Everything that talks to Telegram: the per-update pipeline, the router,
the error responder and the feature handlers. Feature handlers take
``(update, context, session)``, call a service and send the answer;
each module exposes ``register(router)`` to declare its routes.
"""
