"""IAM bulk user import package.

To build an uploadAccount request:
    from iam_import.core.user_import_builder import UserImportBuilder

To run the dry-run HTTP API:
    from iam_import.flask_app import create_app
"""
