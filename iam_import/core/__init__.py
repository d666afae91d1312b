"""Core Business Logic Module

Bulk user import helpers, independent of HTTP frameworks (Flask) and of the
transport used to reach the identity provider.

Module Structure:
    - models.py              : Input records, server format records, results
    - exceptions.py          : UserImportError and stable error codes
    - encoding.py            : Web-safe base64, date and integer field helpers
    - validators.py          : Type predicates and the default request validator
    - record_normalizer.py   : User record → uploadAccount user
    - hash_options.py        : Hash algorithm option validation
    - user_import_builder.py : Batch request/result builder
    - audit.py               : Signed audit trail of import runs

Public APIs:
    Builder (iam_import.core.user_import_builder):
        - UserImportBuilder.build_request()
        - UserImportBuilder.build_response()
        - build_import_request()

    Normalization (iam_import.core.record_normalizer):
        - populate_upload_account_user()
        - convert_multi_factor_info_to_server_format()

    Hash options (iam_import.core.hash_options):
        - populate_options()

    Validation (iam_import.core.validators):
        - validate_upload_account_user()
"""
