"""Unit tests for the Go schema section parser."""

import pytest

from core.errors import ParseError
from mcp_servers.terraform_docs.schema_parser import (
    find_matching_brace,
    locate_schema_section,
    parse_go_schema,
    split_top_level,
)

WIDGET_SOURCE = r'''
package widget

import (
	"github.com/hashicorp/terraform-plugin-sdk/v2/helper/schema"
)

func ResourceWidget() *schema.Resource {
	return &schema.Resource{
		CreateWithoutTimeout: resourceWidgetCreate,

		Schema: map[string]*schema.Schema{
			"name": {
				Type:        schema.TypeString,
				Required:    true,
				ForceNew:    true,
				Description: "Name of the widget, e.g. \"main\" {not a brace}",
			},
			"size": {
				Type:         schema.TypeInt,
				Optional:     true,
				Default:      3,
				ValidateFunc: validation.IntBetween(1, 10),
			},
			"password": {
				Type:      schema.TypeString,
				Optional:  true,
				Sensitive: true,
			},
			"legacy_mode": {
				Type:       schema.TypeBool,
				Optional:   true,
				Deprecated: "use mode instead",
			},
			"arn": {
				Type:     schema.TypeString,
				Computed: true,
			},
			"security_groups": {
				Type:     schema.TypeSet,
				Optional: true,
				Elem:     &schema.Schema{Type: schema.TypeString},
			},
			// network settings
			"network": {
				Type:     schema.TypeList,
				Required: true,
				MaxItems: 1,
				Elem: &schema.Resource{
					Schema: map[string]*schema.Schema{
						"subnet_id": {
							Type:     schema.TypeString,
							Required: true,
						},
					},
				},
			},
			"tags": tftags.TagsSchema(),
		},
	}
}
'''

SCHEMA_FUNC_SOURCE = '''
func ResourceGadget() *schema.Resource {
	return &schema.Resource{
		SchemaFunc: func() map[string]*schema.Schema {
			return map[string]*schema.Schema{
				"rule": {
					Type:     schema.TypeSet,
					Optional: true,
					Elem: &schema.Resource{
						Schema: map[string]*schema.Schema{
							"port": {
								Type:     schema.TypeInt,
								Required: true,
							},
						},
					},
				},
				"label": {
					Type:     schema.TypeString,
					Required: true,
				},
			}
		},
	}
}
'''

ACCESSOR_SOURCE = '''
func gizmoSchema() map[string]*schema.Schema {
	return map[string]*schema.Schema{
		"endpoint": {
			Type:     schema.TypeString,
			Required: true,
		},
	}
}
'''


@pytest.fixture
def widget():
    return parse_go_schema(WIDGET_SOURCE, source="resource_widget.go")


def test_top_level_attributes_are_found(widget):
    assert set(widget.attributes) == {
        "name", "size", "password", "legacy_mode", "arn", "security_groups", "network",
    }


def test_string_attribute_properties(widget):
    name = widget.attributes["name"]
    assert name.required is True
    assert name.optional is False
    assert name.type == "string"
    assert name.force_new is True
    assert name.description == 'Name of the widget, e.g. "main" {not a brace}'


def test_number_default_and_validation(widget):
    size = widget.attributes["size"]
    assert size.optional is True
    assert size.type == "number"
    assert size.default == 3
    assert size.validation_refs == ["validation.IntBetween"]


def test_flags(widget):
    assert widget.attributes["password"].sensitive is True
    assert widget.attributes["legacy_mode"].deprecated is True
    assert widget.attributes["legacy_mode"].type == "bool"
    assert widget.attributes["arn"].computed is True
    assert widget.attributes["arn"].required is False


def test_collection_element_type(widget):
    groups = widget.attributes["security_groups"]
    assert groups.type == "set"
    assert groups.elem_type == "string"
    assert groups.nested is None


def test_nested_block(widget):
    network = widget.attributes["network"]
    assert network.elem_type == "resource"
    assert network.nested["subnet_id"].required is True

    block = widget.block_types["network"]
    assert block.nesting == "list"
    assert block.max_items == 1
    assert set(block.attributes) == {"subnet_id"}


def test_schema_func_pattern_skips_nested_resource_maps():
    schema = parse_go_schema(SCHEMA_FUNC_SOURCE)
    assert set(schema.attributes) == {"rule", "label"}
    assert schema.block_types["rule"].nesting == "set"
    assert schema.attributes["rule"].nested["port"].type == "number"


def test_accessor_function_pattern():
    pattern, body = locate_schema_section(ACCESSOR_SOURCE)
    assert pattern == "schema-accessor"
    assert '"endpoint"' in body
    assert parse_go_schema(ACCESSOR_SOURCE).attributes["endpoint"].required


def test_source_without_schema_section_is_empty():
    schema = parse_go_schema("package main\n\nfunc main() {}\n")
    assert schema.is_empty()


def test_unbalanced_section_raises_parse_error():
    broken = 'Schema: map[string]*schema.Schema{\n "a": {\n Type: schema.TypeString,\n'
    with pytest.raises(ParseError):
        parse_go_schema(broken)


def test_brace_matching_ignores_strings_and_comments():
    text = '{ "}" /* } */ `}` // }\n }'
    assert find_matching_brace(text, 0) == len(text) - 1


def test_split_top_level_respects_nesting():
    assert [s.strip() for s in split_top_level('a: f(1, 2), b: {c, d}, e: "x,y"')] == [
        "a: f(1, 2)", "b: {c, d}", 'e: "x,y"',
    ]
