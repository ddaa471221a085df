from healthmap.config_model.model import load_config
cfg = load_config()  # reads config/config.toml by default
print("Project:", cfg.env.project_name)
print("Table:", cfg.data.table_path)
print("Geometry:", cfg.data.geo_path)
print("Classes (max / quantile):", cfg.classify.max_classes, "/", cfg.classify.quantile_classes)
print("Label iterations:", cfg.labels.iterations)
