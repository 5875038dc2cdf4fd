from xrd_ingestor.core.transformers.naming import (
    humanize_field_name,
    kubernetes_to_catalog_name,
    sanitize_entity_name,
    with_version_suffix,
)


def test_sanitize_entity_name():
    assert sanitize_entity_name("My_Template..Name--") == "my-template-name"


def test_kubernetes_to_catalog_name():
    assert kubernetes_to_catalog_name("xpostgres.db.example.org") == "xpostgres-db-example-org"


def test_with_version_suffix():
    assert with_version_suffix("databases-template", "v1alpha1") == "databases-template-v1alpha1"
    assert with_version_suffix("databases-template", None) == "databases-template"


def test_humanize_field_name():
    assert humanize_field_name("storageGB") == "Storage G B"
    assert humanize_field_name("backup_retention-days") == "Backup Retention Days"
