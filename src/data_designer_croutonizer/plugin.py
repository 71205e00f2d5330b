from data_designer.plugins.plugin import Plugin, PluginType

croutonizer_plugin = Plugin(
    config_qualified_name="data_designer_croutonizer.config.CroutonizerColumnConfig",
    impl_qualified_name="data_designer_croutonizer.generator.CroutonizerColumnGenerator",
    plugin_type=PluginType.COLUMN_GENERATOR,
)
