"""
Menu API Backend: Services Layer
=================================

What:  Business logic between the routes (HTTP) and the database.
How:   Services take a session and a raw input mapping, validate, write and
       return response schemas. Each is exposed as a module-level singleton.

Service Inventory:
    - validation:          input models, message tables, referential checks
    - FileService:         image validation, storage, deletion and URLs
    - ProductService:      product CRUD, image lifecycle
    - RestaurantService:   restaurant CRUD, restaurant + menu views
    - CategoryService:     menu category CRUD
"""
