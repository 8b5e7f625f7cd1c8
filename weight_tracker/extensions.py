from flask_jwt_extended import JWTManager

from weight_tracker.storage.document_store import DocumentStore

# Shared extension instances, bound to an app in create_app()
store = DocumentStore()
jwt = JWTManager()
