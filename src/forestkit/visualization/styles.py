import matplotlib
import matplotlib.pyplot as plt


def set_plot_style(dpi: int = 300, font_size: float = 9.0, family: str = 'DejaVu Sans'):
    # plain white background; forest plots draw their own stripes
    plt.style.use('default')
    matplotlib.rcParams['figure.dpi'] = dpi
    matplotlib.rcParams['savefig.dpi'] = dpi
    matplotlib.rcParams['font.family'] = family
    matplotlib.rcParams['font.size'] = font_size
    matplotlib.rcParams['axes.labelsize'] = font_size
    matplotlib.rcParams['xtick.labelsize'] = font_size
    matplotlib.rcParams['legend.fontsize'] = font_size
    matplotlib.rcParams['axes.grid'] = False
