"""
Services module for business logic separation.

- classifier: request -> VisitorRecord (pure)
- dispatch: hostname/path/method -> Disposition (pure)
- log_store: visitor persistence and admin log query
- origin_proxy: pass-through to origin
- pages: parked page and admin dashboard rendering
"""
