"""Django host for the VT5 startup data layer."""
