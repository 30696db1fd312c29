"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(DB wiring, media host client, error translation, logging). Keep
feature-specific SQL in the corresponding feature package (e.g. `orders/`).
"""
