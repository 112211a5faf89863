"""Registration of histograms with :func:`dask.sizeof.sizeof`."""


def register(sizeof):
    @sizeof.register_lazy("histogrid")
    def lazy_register_histogrid_Histogram():
        import dask

        from histogrid.core import Histogram

        @sizeof.register(Histogram)
        def register_histogrid_Histogram(data):
            return dask.sizeof.sizeof(data.view(flow=True))
