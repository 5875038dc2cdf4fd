from dataclasses import replace

from xrd_ingestor.core.config import GitPublishConfig, LinkConfig, PublishPhaseConfig, TransformerConfig
from xrd_ingestor.core.definitions import load_definition
from xrd_ingestor.core.transformers.detector import VersionDetector
from xrd_ingestor.core.transformers.models import ParameterProperty, ParameterSection, ProvisioningStep
from xrd_ingestor.core.transformers.parameter_extractor import ParameterExtractor
from xrd_ingestor.core.transformers.references import StepOutputRef
from xrd_ingestor.core.transformers.steps import ClaimStepGenerator, DirectStepGenerator
from xrd_ingestor.core.transformers.template_builder import TemplateBuilder


def _build(definition, generator_cls=DirectStepGenerator, config=None, version_index=0):
    detector = VersionDetector()
    version = definition.spec.versions[version_index]
    sections = ParameterExtractor(detector, config).extract(definition, version)
    steps = generator_cls(detector, config).generate(definition, version, sections)
    builder = TemplateBuilder(detector, config)
    return builder, builder.build(definition, version, sections, steps)


def test_default_metadata(modern_namespaced):
    builder, template = _build(modern_namespaced)
    meta = template.metadata

    assert meta.name == "databases-template"
    assert meta.title == "Database Template"
    assert meta.description == "Create a Database resource via Crossplane"
    assert meta.tags == ["crossplane", "infrastructure", "crossplane-v2", "namespaced"]
    assert meta.annotations["crossplane.io/xrd"] == "databases.platform.example.org"
    assert meta.annotations["crossplane.io/version"] == "v1alpha1"
    assert meta.annotations["crossplane.io/api-version"] == "v2"
    assert meta.annotations["crossplane.io/scope"] == "Namespaced"
    assert meta.annotations["crossplane.io/uses-claims"] == "false"
    assert meta.annotations["backstage.io/lifecycle"] == "production"
    assert template.type == "crossplane-resource"
    assert builder.validate(template) == []


def test_claim_template_title(legacy):
    _, template = _build(legacy, ClaimStepGenerator)
    assert template.metadata.title == "FooClaim Template"
    assert template.metadata.annotations["crossplane.io/uses-claims"] == "true"
    assert "crossplane-v1" in template.metadata.tags


def test_annotations_links_and_tags_from_definition(docs):
    doc = docs.modern_namespaced()
    doc["metadata"]["labels"] = {"openportal.dev/tags": "db, sql"}
    doc["metadata"]["annotations"] = {
        "openportal.dev/title": "Managed Database",
        "backstage.io/description": "A managed database",
        "backstage.io/icon": "storage",
        "backstage.io/tags": "managed",
        "openportal.dev/docs-url": "https://docs.example.org/db",
        "openportal.dev/support-url": "https://help.example.org",
    }
    doc["clusterName"] = "prod-eu"
    config = TransformerConfig(
        additional_tags=["team-data"],
        additional_annotations={"example.org/tier": "gold"},
        additional_links=[LinkConfig(url="https://status.example.org", title="Status")],
    )
    _, template = _build(load_definition(doc), config=config)
    meta = template.metadata

    assert meta.title == "Managed Database"
    assert meta.description == "A managed database"
    assert meta.tags == [
        "crossplane",
        "infrastructure",
        "db",
        "sql",
        "managed",
        "crossplane-v2",
        "namespaced",
        "team-data",
    ]
    assert meta.annotations["backstage.io/icon"] == "storage"
    assert meta.annotations["example.org/tier"] == "gold"
    assert meta.annotations["backstage.io/managed-by-location"] == "cluster: prod-eu"
    assert [(l.title, l.icon) for l in meta.links] == [
        ("Documentation", "docs"),
        ("Support", "help"),
        ("Status", None),
    ]


def test_multi_version_names_are_disambiguated(docs):
    doc = docs.modern_namespaced()
    v2 = dict(doc["spec"]["versions"][0], name="v1beta1", deprecated=True)
    doc["spec"]["versions"].append(v2)
    definition = load_definition(doc)

    _, first = _build(definition)
    _, second = _build(definition, version_index=1)
    assert first.metadata.name == "databases-template-v1alpha1"
    assert second.metadata.name == "databases-template-v1beta1"
    assert second.metadata.title == "Database Template (v1beta1)"
    assert "deprecated" in second.metadata.tags
    assert second.metadata.annotations["backstage.io/deprecated"] == "true"


def test_name_prefix_and_override_annotation(docs):
    config = TransformerConfig(name_prefix="team-")
    _, template = _build(load_definition(docs.modern_namespaced()), config=config)
    assert template.metadata.name == "team-databases-template"

    doc = docs.modern_namespaced()
    doc["metadata"]["annotations"] = {"backstage.io/template-name": "My DB"}
    _, template = _build(load_definition(doc))
    assert template.metadata.name == "my-db"


def test_output_links_follow_generated_steps(legacy):
    config = TransformerConfig(
        include_publishing=True,
        include_register=True,
        publish_phase=PublishPhaseConfig(git=GitPublishConfig(repo_url="github.com?owner=o&repo=r")),
    )
    _, template = _build(legacy, ClaimStepGenerator, config)
    links = {l.title: l.url for l in template.output.links}
    assert links == {
        "View in Kubernetes": StepOutputRef("create-claim", "resourceUrl"),
        "View Pull Request": StepOutputRef("publish-git", "pullRequestUrl"),
        "View in Catalog": StepOutputRef("register", "entityRef"),
    }


def test_output_text(multi_cluster):
    config = TransformerConfig(kubernetes_ui_enabled=False, additional_output_text=["Ping #data for help."])
    _, template = _build(multi_cluster, config=config)
    assert template.output.links == []

    text = template.output.to_dict()["text"]
    assert text.splitlines() == [
        "## Database Created Successfully",
        "",
        "Your resource has been created with the following details:",
        "- **Name**: ${{ parameters.xrName }}",
        "- **Namespace**: ${{ parameters.namespace }}",
        "- **Owner**: ${{ parameters.owner }}",
        "- **Cluster**: ${{ parameters.cluster }}",
        "",
        "Ping #data for help.",
    ]


def test_gitops_status_in_output_text(legacy):
    config = TransformerConfig(
        include_publishing=True,
        publish_phase=PublishPhaseConfig(git=GitPublishConfig(repo_url="github.com?owner=o&repo=r")),
    )
    _, template = _build(legacy, ClaimStepGenerator, config)
    text = template.output.to_dict()["text"]
    assert "### GitOps Status" in text
    assert '"A pull request has been created for review." if parameters.createPr' in text


def test_validate_reports_every_violation(modern_namespaced):
    builder, template = _build(modern_namespaced)
    broken = replace(
        template,
        metadata=replace(template.metadata, name="Bad_Name"),
        parameters=[ParameterSection(title="")],
        steps=[ProvisioningStep(id="", name="x", action="")],
    )
    assert builder.validate(broken) == [
        "Parameter section 1 is missing a title",
        'Parameter section "" has no properties',
        "Step 1 is missing an ID",
        'Step "1" is missing an action',
        "Template name must contain only lowercase letters, numbers, and hyphens",
    ]


def test_validate_empty_template(modern_namespaced):
    builder, template = _build(modern_namespaced)
    empty = replace(template, type="", parameters=[], steps=[])
    assert builder.validate(empty) == [
        "Template type is required",
        "Template must have at least one parameter section",
        "Template must have at least one step",
    ]


def test_merge_parameter_sections_does_not_mutate_inputs():
    a = ParameterSection(
        title="Config",
        properties={"x": ParameterProperty(title="X", type="string")},
        required=["x"],
    )
    b = ParameterSection(
        title="Config",
        properties={"y": ParameterProperty(title="Y", type="number")},
        required=["y", "x"],
        description="More",
    )
    c = ParameterSection(title="Other", properties={"z": ParameterProperty(title="Z", type="boolean")})

    merged = TemplateBuilder(VersionDetector()).merge_parameter_sections([a, b, c])

    assert [s.title for s in merged] == ["Config", "Other"]
    assert list(merged[0].properties) == ["x", "y"]
    assert merged[0].required == ["x", "y"]
    assert merged[0].description == "More"
    assert list(a.properties) == ["x"]
    assert a.required == ["x"]


def test_direct_commit_config_drives_output(legacy):
    config = TransformerConfig(
        include_publishing=True,
        publish_phase=PublishPhaseConfig(git=GitPublishConfig(repo_url="github.com?owner=o&repo=r", create_pr=False)),
    )
    _, template = _build(legacy, ClaimStepGenerator, config)
    publish = next(s for s in template.steps if s.id == "publish-git")
    assert publish.input["createPr"] is False

    assert [l.title for l in template.output.links] == ["View in Kubernetes"]
    text = template.output.to_dict()["text"]
    assert text.splitlines()[-1] == "Changes have been committed directly to the repository."
    assert "pull request" not in text
    assert "parameters.createPr" not in text


def test_pull_request_config_drives_output(legacy):
    config = TransformerConfig(
        include_publishing=True,
        publish_phase=PublishPhaseConfig(git=GitPublishConfig(repo_url="github.com?owner=o&repo=r", create_pr=True)),
    )
    _, template = _build(legacy, ClaimStepGenerator, config)
    assert "View Pull Request" in [l.title for l in template.output.links]
    text = template.output.to_dict()["text"]
    assert text.splitlines()[-1] == "A pull request has been created for review."
    assert "parameters.createPr" not in text
