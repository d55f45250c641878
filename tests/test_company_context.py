from innovators.services.company_context import CompanyContext, load_company_context, parse_company_context


class TestCompanyContext:
    def test_bundled_context_loads(self, real_company):
        assert real_company.name == "Opiniion"
        assert "Engineering" in real_company.teams
        assert any(tool.has_ai for tool in real_company.approved_tools)
        assert real_company.tips

    def test_aliases_resolve_to_known_teams(self, real_company):
        for target in real_company.department_aliases.values():
            assert target in real_company.teams

    def test_parse_lowercases_aliases_and_skips_nameless_tools(self):
        context = parse_company_context(
            {
                "teams": ["Sales"],
                "department_aliases": {"BizDev": "Sales"},
                "approved_tools": [{"name": "ChatGPT", "has_ai": True}, {"category": "x"}],
            }
        )
        assert context.department_aliases == {"bizdev": "Sales"}
        assert [tool.name for tool in context.approved_tools] == ["ChatGPT"]

    def test_missing_file_gives_empty_context(self, tmp_path):
        assert load_company_context(str(tmp_path / "missing.yaml")) == CompanyContext()
