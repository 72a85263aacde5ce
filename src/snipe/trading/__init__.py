"""Trading runtime: persistence, engines, ingress and operator surface"""
