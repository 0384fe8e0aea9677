from contact_discovery.ingestion.compliance import check_compliance
from contact_discovery.ingestion.models import BulkContact


def test_check_compliance_flags_each_rule():
    contacts = [
        BulkContact(first_name="Jane", last_name="Doe", company="TechCorp"),
        BulkContact(first_name="", last_name="Smith", domain="acme.com"),
        BulkContact(first_name="Ann", last_name="Lee"),
        BulkContact(first_name="Bob", last_name="Ray", company="Initech", do_not_contact=True, opted_out=True),
        BulkContact(first_name="JANE", last_name="doe", company="techcorp"),
    ]

    report = check_compliance(contacts)

    assert report.total_rows == 5
    assert [contact.full_name for contact in report.valid_contacts] == ["Jane Doe"]
    assert [(issue.row, issue.issues) for issue in report.issues] == [
        (3, ["Missing first name"]),
        (4, ["Need company, domain, or LinkedIn"]),
        (5, ["Do Not Contact", "Opted out"]),
        (6, ["Duplicate"]),
    ]


def test_duplicates_only_count_accepted_rows():
    contacts = [
        BulkContact(first_name="Jane", last_name="Doe", company="TechCorp", opted_out=True),
        BulkContact(first_name="Jane", last_name="Doe", company="TechCorp"),
    ]

    report = check_compliance(contacts)

    assert len(report.valid_contacts) == 1
    assert report.issues[0].row == 2
    assert report.to_dict()["issues"] == [{"row": 2, "contact": "Jane Doe", "issues": ["Opted out"]}]
