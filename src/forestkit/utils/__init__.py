from .config import load_config, get_format_options, get_stripe_spec, get_figure_size

__all__ = ["load_config", "get_format_options", "get_stripe_spec", "get_figure_size"]
